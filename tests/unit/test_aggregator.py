from src.services.github.models import ReviewComment
from src.services.review.aggregator import CommentAggregator, HunkResult


def _result(path: str, index: int, *lines: int) -> HunkResult:
    return HunkResult(
        path=path,
        hunk_index=index,
        status="reviewed",
        comments=[ReviewComment(path=path, line=line, body=f"{path}:{line}") for line in lines],
    )


class TestCommentAggregator:
    """Tests for flattening and filtering review comments."""

    def test_flattens_in_file_then_hunk_order(self) -> None:
        results = [
            _result("a.py", 0, 3, 1),
            _result("a.py", 1, 20),
            _result("b.py", 0, 2),
        ]

        comments = CommentAggregator().aggregate(results)

        assert [(c.path, c.line) for c in comments] == [
            ("a.py", 3),
            ("a.py", 1),
            ("a.py", 20),
            ("b.py", 2),
        ]

    def test_failed_and_empty_results_contribute_nothing(self) -> None:
        results = [
            HunkResult(path="a.py", hunk_index=0, status="failed", reason="bad json"),
            _result("a.py", 1),
            _result("b.py", 0, 4),
        ]

        comments = CommentAggregator().aggregate(results)

        assert comments == [ReviewComment(path="b.py", line=4, body="b.py:4")]

    def test_exclusion_patterns(self) -> None:
        aggregator = CommentAggregator(["*.md", " dist/* ", ""])
        results = [
            _result("README.md", 0, 1),
            _result("docs/guide.md", 0, 1),
            _result("dist/bundle.js", 0, 1),
            _result("src/app.py", 0, 1),
        ]

        comments = aggregator.aggregate(results)

        assert [c.path for c in comments] == ["src/app.py"]
        assert aggregator.exclude_patterns == ["*.md", "dist/*"]

    def test_is_excluded(self) -> None:
        aggregator = CommentAggregator(["**/*.lock", "vendor/*"])

        assert aggregator.is_excluded("frontend/yarn.lock")
        assert aggregator.is_excluded("vendor/lib.go")
        assert not aggregator.is_excluded("src/vendor.py")

    def test_globstar_matches_root_level_files(self) -> None:
        aggregator = CommentAggregator(["**/*.md", "**/*.json", "src/**/generated/*"])

        assert aggregator.is_excluded("README.md")
        assert aggregator.is_excluded("package.json")
        assert aggregator.is_excluded("docs/a.md")
        assert aggregator.is_excluded("src/generated/api.py")
        assert aggregator.is_excluded("src/client/generated/api.py")
        assert not aggregator.is_excluded("README.rst")
        assert not aggregator.is_excluded("lib/generated/api.py")

    def test_globstar_root_files_are_dropped_from_comments(self) -> None:
        aggregator = CommentAggregator(["**/*.md"])

        comments = aggregator.aggregate([_result("README.md", 0, 1), _result("app.py", 0, 2)])

        assert [c.path for c in comments] == ["app.py"]

    def test_no_patterns_excludes_nothing(self) -> None:
        assert not CommentAggregator().is_excluded("anything/at/all.py")
        assert not CommentAggregator(None).is_excluded("x")
