"""Unit tests for the name inflection helpers."""

import pytest

from restbone.core.inflection import classify, pluralize, singularize


class TestPluralize:
    @pytest.mark.parametrize(
        "word,expected",
        [
            ("post", "posts"),
            ("comment", "comments"),
            ("entry", "entries"),
            ("box", "boxes"),
            ("church", "churches"),
            ("bus", "buses"),
            ("status", "statuses"),
            ("wife", "wives"),
            ("half", "halves"),
            ("quiz", "quizzes"),
            ("mouse", "mice"),
            ("person", "people"),
            ("child", "children"),
            ("blog_post", "blog_posts"),
        ],
    )
    def test_pluralize(self, word, expected):
        assert pluralize(word) == expected

    @pytest.mark.parametrize("word", ["posts", "entries", "people", "children", "mice", "wives", "blog_posts"])
    def test_plural_words_are_unchanged(self, word):
        assert pluralize(word) == word

    @pytest.mark.parametrize("word", ["sheep", "equipment", "series", "information"])
    def test_uncountable_words_are_unchanged(self, word):
        assert pluralize(word) == word

    def test_irregular_keeps_leading_capital(self):
        assert pluralize("Person") == "People"

    def test_empty_string(self):
        assert pluralize("") == ""


class TestSingularize:
    @pytest.mark.parametrize(
        "word,expected",
        [
            ("posts", "post"),
            ("comments", "comment"),
            ("entries", "entry"),
            ("boxes", "box"),
            ("buses", "bus"),
            ("statuses", "status"),
            ("wives", "wife"),
            ("quizzes", "quiz"),
            ("mice", "mouse"),
            ("people", "person"),
            ("children", "child"),
            ("blog_posts", "blog_post"),
        ],
    )
    def test_singularize(self, word, expected):
        assert singularize(word) == expected

    @pytest.mark.parametrize("word", ["post", "entry", "person", "child", "status", "bus", "address"])
    def test_singular_words_are_unchanged(self, word):
        assert singularize(word) == word

    def test_uncountable_words_are_unchanged(self):
        assert singularize("news") == "news"
        assert singularize("sheep") == "sheep"

    def test_irregular_keeps_leading_capital(self):
        assert singularize("People") == "Person"


class TestClassify:
    @pytest.mark.parametrize(
        "word,expected",
        [
            ("post", "Post"),
            ("blog_post", "BlogPost"),
            ("blog_post_comment", "BlogPostComment"),
            ("blog-post", "BlogPost"),
            ("blog post", "BlogPost"),
            ("BlogPost", "BlogPost"),
            ("", ""),
        ],
    )
    def test_classify(self, word, expected):
        assert classify(word) == expected
