"""Tests for PersonDirectory."""

import threading

import pytest

from crm_shell.directory import PersonDirectory
from crm_shell.errors import DirectoryError
from crm_shell.models import DEFAULT_PEOPLE, Person


class TestPersonDirectoryLoad:
    """Test the one-time bulk load."""

    def test_ids_assigned_in_order(self, directory):
        """Ids start at 1 and follow the seed order."""
        people = directory.all()
        assert [p.id for p in people] == list(range(1, len(DEFAULT_PEOPLE) + 1))
        assert [p.name for p in people] == list(DEFAULT_PEOPLE)

    def test_len(self, directory):
        assert len(directory) == 9

    def test_second_load_rejected(self, directory):
        """Loading twice is a programming error."""
        with pytest.raises(DirectoryError):
            directory.load(["Someone Else"])
        assert len(directory) == 9

    @pytest.mark.parametrize("bad_name", ["", "   ", None, 42])
    def test_invalid_names_abort_load(self, bad_name):
        """Blank or non-string names abort initialization."""
        directory = PersonDirectory(ready_timeout=0.01)
        with pytest.raises(DirectoryError):
            directory.load(["Valid Name", bad_name])
        assert directory.is_loaded is False

    def test_names_are_stripped(self):
        directory = PersonDirectory.from_names(["  Ada Lovelace "])
        assert directory.find_by_id(1) == Person(1, "Ada Lovelace")

    def test_read_before_load_times_out(self):
        """Reads wait for the load and fail if it never happens."""
        directory = PersonDirectory(ready_timeout=0.01)
        with pytest.raises(DirectoryError):
            directory.find_by_id(1)
        with pytest.raises(DirectoryError):
            directory.find_by_name("")

    def test_read_waits_for_concurrent_load(self):
        """A reader started before load() sees the fully loaded directory."""
        directory = PersonDirectory(ready_timeout=5.0)
        results = []

        reader = threading.Thread(target=lambda: results.append(directory.find_by_name("")))
        reader.start()
        directory.load(DEFAULT_PEOPLE)
        reader.join(timeout=5.0)

        assert len(results) == 1
        assert len(results[0]) == 9


class TestFindById:
    """Test point lookup."""

    def test_every_loaded_id_resolves(self, directory):
        for index, name in enumerate(DEFAULT_PEOPLE, start=1):
            assert directory.find_by_id(index) == Person(index, name)

    @pytest.mark.parametrize("unknown_id", [0, -1, 10, 42])
    def test_unknown_id_returns_none(self, directory, unknown_id):
        assert directory.find_by_id(unknown_id) is None


class TestFindByName:
    """Test substring search."""

    def test_stephane_matches_ids_3_and_4(self, directory):
        """Matches are returned in store order."""
        matches = directory.find_by_name("stephane")
        assert [p.id for p in matches] == [3, 4]
        assert [p.name for p in matches] == ["Stephane Maldini", "Stephane Nicoll"]

    def test_case_insensitive(self, directory):
        assert directory.find_by_name("BRIAN") == directory.find_by_name("brian")
        assert [p.id for p in directory.find_by_name("BrIaN")] == [1, 2]

    def test_substring_inside_name(self, directory):
        assert [p.name for p in directory.find_by_name("bhav")] == ["Madhura Bhave"]

    def test_empty_fragment_matches_all(self, directory):
        assert directory.find_by_name("") == directory.all()

    def test_no_match(self, directory):
        assert directory.find_by_name("zzz") == []

    def test_results_only_contain_matches(self, directory):
        for fragment in ["a", "an", "James", "o"]:
            for person in directory.find_by_name(fragment):
                assert fragment.lower() in person.name.lower()

    def test_results_are_complete(self, directory):
        fragment = "e"
        expected = [p for p in directory.all() if fragment in p.name.lower()]
        assert directory.find_by_name(fragment) == expected
