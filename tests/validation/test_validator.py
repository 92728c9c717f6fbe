"""Tests for the artifact schema validator."""

import json

import pytest

from artifact_lanes.parsers.frontmatter import serialize_record
from artifact_lanes.schema import ArtifactRecord
from artifact_lanes.validation.validator import (
    EXIT_INVALID,
    EXIT_OK,
    find_markdown_files,
    validate_directory,
    validate_document,
)

BODY = "Keep artifacts atomic: one idea per post."


def make_document(**overrides):
    """Serialize a valid record, with selected fields replaced."""
    fields = dict(
        title="Keep Artifacts Atomic",
        lane="A",
        status="draft",
        tags=["kernel", "artifact", "draft"],
        summary="One idea per post.",
        publish_targets=["github"],
        body=BODY,
    )
    fields.update(overrides)
    return serialize_record(ArtifactRecord(**fields))


def write(directory, name, text):
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestValidateDocument:
    def test_valid_document(self):
        assert validate_document(make_document()) == []

    def test_empty_tags_only_error(self):
        """An explicitly empty tag list should produce exactly one error."""
        assert validate_document(make_document(tags=[])) == ["tags empty"]

    def test_missing_frontmatter(self):
        """A plain body should report every required key."""
        errors = validate_document(BODY)

        assert errors[:6] == [
            "missing frontmatter key: title",
            "missing frontmatter key: lane",
            "missing frontmatter key: status",
            "missing frontmatter key: tags",
            "missing frontmatter key: summary",
            "missing frontmatter key: publish_targets",
        ]
        assert "title is empty" in errors
        assert "invalid lane: " in errors

    def test_reports_all_violations(self):
        """Should aggregate errors rather than stop at the first one."""
        document = make_document(
            title="A *bold* title",
            lane="Z",
            status="published",
            tags=["Good", "ok-tag", "has space"],
            publish_targets=["github", "myspace"],
            summary="",
        )

        errors = validate_document(document)

        assert errors == [
            "title contains markdown characters",
            "invalid lane: Z",
            "invalid status: published",
            "bad tag slugs: Good,has space",
            "invalid publish_targets: myspace",
            "summary empty",
        ]

    def test_title_limits(self):
        errors = validate_document(make_document(title=" ".join(["word"] * 13)))

        assert errors == ["title exceeds 12 words"]

        errors = validate_document(make_document(title="x" * 81))

        assert errors == ["title exceeds 80 chars"]

    def test_too_many_tags(self):
        errors = validate_document(make_document(tags=[f"t{i}" for i in range(11)]))

        assert errors == ["too many tags (>10)"]

    def test_summary_limit(self):
        assert validate_document(make_document(summary="s" * 241)) == [
            "summary exceeds 240 chars"
        ]

    def test_body_too_short(self):
        assert validate_document(make_document(body="short")) == ["content body too short"]

    def test_strict_body_limit(self):
        """Long bodies pass normally and fail in strict mode."""
        document = make_document(body="x" * 6001)

        assert validate_document(document) == []
        assert validate_document(document, strict=True) == ["content body too long (>6000 chars)"]

    def test_deeply_nested_tags(self):
        """An undecodable tags line should be reported, not raised."""
        document = make_document().replace(
            'tags: ["kernel", "artifact", "draft"]', "tags: " + "[" * 100000 + "]" * 100000
        )

        assert validate_document(document) == ["tags empty"]

    def test_unquoted_values(self):
        """Hand-written frontmatter with bare scalars should still validate."""
        document = (
            "---\n"
            "title: Keep Artifacts Atomic\n"
            "lane: B\n"
            "status: draft\n"
            'tags: ["kernel"]\n'
            "summary: One idea per post.\n"
            'publish_targets: ["gist"]\n'
            "---\n\n" + BODY
        )

        assert validate_document(document) == []


class TestValidateDirectory:
    def test_skips_hidden_and_non_markdown(self, tmp_path):
        write(tmp_path, "a.md", make_document())
        write(tmp_path, ".hidden.md", "not checked")
        write(tmp_path, ".cache/b.md", "not checked")
        write(tmp_path, "notes.txt", "not checked")
        write(tmp_path, "sub/c.md", make_document(title="Another Title"))

        files = find_markdown_files(tmp_path)

        assert [p.relative_to(tmp_path).as_posix() for p in files] == ["a.md", "sub/c.md"]

    def test_does_not_follow_symlinked_directories(self, tmp_path):
        """A directory symlink loop should not be walked."""
        write(tmp_path, "sub/a.md", make_document())
        (tmp_path / "sub" / "loop").symlink_to(tmp_path, target_is_directory=True)

        files = find_markdown_files(tmp_path)

        assert [p.relative_to(tmp_path).as_posix() for p in files] == ["sub/a.md"]

    def test_duplicate_title_slugs_flag_both_files(self, tmp_path):
        write(tmp_path, "one.md", make_document(title="Keep Artifacts Atomic"))
        write(tmp_path, "two.md", make_document(title="Keep artifacts atomic!"))
        write(tmp_path, "three.md", make_document(title="Something Else"))

        report = validate_directory(tmp_path)

        by_file = {r.file: r.errors for r in report.results}
        assert by_file["one.md"] == ["duplicate title slug: keep-artifacts-atomic"]
        assert by_file["two.md"] == ["duplicate title slug: keep-artifacts-atomic"]
        assert by_file["three.md"] == []
        assert report.invalid == 2
        assert report.exit_code == EXIT_INVALID

    def test_all_valid(self, tmp_path):
        write(tmp_path, "one.md", make_document())

        report = validate_directory(tmp_path)

        assert report.total == 1
        assert report.invalid == 0
        assert report.exit_code == EXIT_OK

    def test_empty_directory(self, tmp_path):
        report = validate_directory(tmp_path)

        assert report.total == 0
        assert report.exit_code == EXIT_OK

    def test_report_formats(self, tmp_path):
        write(tmp_path, "good.md", make_document())
        write(tmp_path, "bad.md", make_document(title="Other", tags=[]))

        report = validate_directory(tmp_path)

        assert report.to_lines() == [
            "ERR bad.md",
            "  - tags empty",
            "OK  good.md",
            "",
            "Checked 2 file(s). Invalid: 1.",
        ]
        data = json.loads(json.dumps(report.to_dict()))
        assert data == {
            "total": 2,
            "invalid": 1,
            "results": [
                {"file": "bad.md", "errors": ["tags empty"]},
                {"file": "good.md", "errors": []},
            ],
        }

    @pytest.mark.parametrize("strict", [False, True])
    def test_strict_flag_passed_through(self, tmp_path, strict):
        write(tmp_path, "long.md", make_document(body="x" * 7000))

        report = validate_directory(tmp_path, strict=strict)

        assert report.invalid == (1 if strict else 0)
