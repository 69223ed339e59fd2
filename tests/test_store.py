"""BookStore tests: validation, search, pagination window, drafts."""

import pytest

from bookshelf.errors import BookValidationError
from bookshelf.models import BookDraft


def _seed(store):
    store.create({"title": "The Hobbit", "author": "J.R.R. Tolkien", "genre": "Fantasy", "year": "1937"})
    store.create({"title": "Dune", "author": "Frank Herbert", "genre": "Science Fiction", "year": "1965"})
    store.create({"title": "Emma", "author": "Jane Austen", "genre": "Romance", "year": "1815"})
    store.create({"title": "Neuromancer", "author": "William Gibson", "genre": "", "year": ""})


class TestCreate:
    def test_create_assigns_id_and_parses_year(self, store):
        book = store.create({"title": "Dune", "author": "Frank Herbert", "year": "1965"})
        assert book.id is not None
        assert book.year == 1965
        assert book.genre is None

    def test_missing_title_raises_and_persists_nothing(self, store):
        with pytest.raises(BookValidationError) as info:
            store.create({"title": "", "author": "A"})
        errors = info.value.errors
        assert [e.field for e in errors] == ["title"]
        assert errors[0].message == 'Please provide a value for "title"'
        assert store.find_and_count_all()[0] == 0

    def test_blank_title_and_author_both_reported(self, store):
        with pytest.raises(BookValidationError) as info:
            store.create({"title": "   ", "author": ""})
        assert {e.field for e in info.value.errors} == {"title", "author"}

    def test_non_numeric_year_rejected(self, store):
        with pytest.raises(BookValidationError) as info:
            store.create({"title": "T", "author": "A", "year": "nineteen"})
        assert info.value.errors[0].field == "year"
        assert info.value.errors[0].message == "Please provide a valid year"


class TestFindAndCountAll:
    def test_window_and_total(self, store):
        for i in range(1, 26):
            store.create({"title": f"Book {i:02d}", "author": "A"})
        count, rows = store.find_and_count_all(offset=20, limit=10)
        assert count == 25
        assert [b.title for b in rows] == [f"Book {i}" for i in range(21, 26)]

    @pytest.mark.parametrize(
        "search, titles",
        [
            ("tolkien", ["The Hobbit"]),
            ("DUNE", ["Dune"]),
            ("fiction", ["Dune"]),
            ("18", ["Emma"]),
            ("ER", ["Dune", "Neuromancer"]),
        ],
    )
    def test_search_is_case_insensitive_substring(self, store, search, titles):
        _seed(store)
        count, rows = store.find_and_count_all(search=search)
        assert count == len(titles)
        assert sorted(b.title for b in rows) == sorted(titles)

    def test_empty_search_means_no_filter(self, store):
        _seed(store)
        assert store.find_and_count_all(search="")[0] == 4
        assert store.find_and_count_all(search=None)[0] == 4

    def test_spaces_in_search_are_matched_literally(self, store):
        store.create({"title": "Dune", "author": "Herbert"})
        store.create({"title": "The Hobbit", "author": "Tolkien"})
        count, rows = store.find_and_count_all(search=" ")
        assert count == 1
        assert rows[0].title == "The Hobbit"
        assert store.find_and_count_all(search=" dune")[0] == 0

    def test_search_folds_non_ascii_case(self, store):
        store.create({"title": "Émile", "author": "Rousseau"})
        store.create({"title": "Ödipus", "author": "Sophokles"})
        count, rows = store.find_and_count_all(search="émile")
        assert count == 1
        assert rows[0].title == "Émile"
        assert store.find_and_count_all(search="ÖDIPUS")[0] == 1

    def test_like_wildcards_are_literal(self, store):
        _seed(store)
        assert store.find_and_count_all(search="%")[0] == 0
        assert store.find_and_count_all(search="_")[0] == 0


class TestLookupUpdateDestroy:
    def test_find_by_pk_ignores_non_integer_ids(self, store):
        book = store.create({"title": "Emma", "author": "Jane Austen"})
        assert store.find_by_pk(str(book.id)).title == "Emma"
        assert store.find_by_pk("abc") is None
        assert store.find_by_pk("9" * 40) is None
        assert store.find_by_pk(book.id + 1) is None

    def test_update_applies_fields(self, store):
        book = store.create({"title": "Emma", "author": "Jane Austen"})
        store.update(book, {"title": "Emma", "author": "Jane Austen", "genre": "Romance", "year": "1815"})
        again = store.find_by_pk(book.id)
        assert again.genre == "Romance"
        assert again.year == 1815

    def test_invalid_update_leaves_record_untouched(self, store):
        book = store.create({"title": "Emma", "author": "Jane Austen"})
        with pytest.raises(BookValidationError):
            store.update(book, {"title": "", "author": "Someone Else"})
        assert book.title == "Emma"
        assert book.author == "Jane Austen"

    def test_destroy_removes_one_row(self, store):
        keep = store.create({"title": "Dune", "author": "Frank Herbert"})
        gone = store.create({"title": "Emma", "author": "Jane Austen"})
        store.destroy(gone)
        assert store.find_by_pk(gone.id) is None
        assert store.find_by_pk(keep.id) is not None
        assert store.find_and_count_all()[0] == 1


class TestBuild:
    def test_build_keeps_raw_values_and_never_persists(self, store):
        draft = store.build({"title": "", "author": "A", "genre": None, "year": "19x"})
        assert isinstance(draft, BookDraft)
        assert draft.id is None
        assert (draft.title, draft.author, draft.genre, draft.year) == ("", "A", "", "19x")
        assert store.find_and_count_all()[0] == 0

    def test_build_can_carry_an_id(self, store):
        assert store.build({"title": "T"}, book_id=7).id == 7
