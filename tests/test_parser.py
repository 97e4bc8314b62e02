"""Tests for the document parser, the walker and file discovery."""

import os

import pytest

from sha_sentry.errors import DocumentError
from sha_sentry.models import RunStatistics
from sha_sentry.parser import (
    MappingNode,
    NullNode,
    ScalarNode,
    SequenceNode,
    discover_files,
    find_line,
    iter_invocation_sites,
    load_document,
)


# ---------------------------------------------------------------------------
# load_document
# ---------------------------------------------------------------------------

class TestLoadDocument:
    def test_mapping_keeps_declaration_order(self):
        root = load_document("b: 1\na: 2\nc: 3\n")
        assert isinstance(root, MappingNode)
        assert [k for k, _ in root.entries] == ["b", "a", "c"]

    def test_on_key_stays_a_string(self):
        root = load_document("on: push\n")
        assert root.entries[0][0] == "on"

    def test_sequence(self):
        root = load_document("- a\n- b\n")
        assert isinstance(root, SequenceNode)
        assert root.items == (ScalarNode("a"), ScalarNode("b"))

    def test_null_values(self):
        root = load_document("pull_request:\n")
        assert isinstance(root.get("pull_request"), NullNode)

    def test_non_string_scalars_keep_their_tag(self):
        root = load_document("uses: 123\n")
        value = root.get("uses")
        assert isinstance(value, ScalarNode)
        assert value.is_string is False

    def test_quoted_number_is_string(self):
        root = load_document("version: '3.12'\n")
        assert root.get("version").is_string is True

    def test_empty_document(self):
        assert isinstance(load_document(""), NullNode)

    def test_invalid_yaml(self):
        with pytest.raises(DocumentError):
            load_document("jobs: [unclosed\n")

    def test_multiple_documents_rejected(self):
        with pytest.raises(DocumentError):
            load_document("a: 1\n---\nb: 2\n")

    def test_recursive_alias_rejected(self):
        with pytest.raises(DocumentError):
            load_document("a: &x\n  b: *x\n")

    def test_aliases_are_expanded(self):
        root = load_document("base: &s\n  uses: actions/checkout@v4\ncopy: *s\n")
        assert root.get("copy").get("uses") == ScalarNode("actions/checkout@v4")


# ---------------------------------------------------------------------------
# iter_invocation_sites
# ---------------------------------------------------------------------------

class TestWalker:
    def test_finds_sites_in_document_order(self, ci_workflow_path):
        with open(ci_workflow_path, encoding="utf-8") as f:
            root = load_document(f.read())
        refs = [site.raw_reference for site in iter_invocation_sites(root)]
        assert refs == [
            "actions/checkout@v4",
            "actions/setup-python@v5",
            "./.github/actions/setup",
            "docker://alpine:3.19",
            "actions/cache@0c45773b623bea8c8e75f6c82b208c3cf94ea4f9",
            "my-org/deploy-action@main",
            "octo-org/example-repo/.github/workflows/reusable.yml@v1",
            "softprops/action-gh-release@1.2.3",
        ]

    def test_structural_paths(self, ci_workflow_path):
        with open(ci_workflow_path, encoding="utf-8") as f:
            root = load_document(f.read())
        sites = list(iter_invocation_sites(root))
        assert sites[0].path == ("jobs", "build", "steps", 0, "uses")
        assert sites[6].path == ("jobs", "lint", "uses")

    def test_composite_action_steps(self):
        text = (
            "runs:\n"
            "  using: composite\n"
            "  steps:\n"
            "    - uses: actions/setup-node@v4\n"
        )
        sites = list(iter_invocation_sites(load_document(text)))
        assert [s.path for s in sites] == [("runs", "steps", 0, "uses")]

    def test_order_is_stable_across_nesting_depths(self):
        text = (
            "a:\n"
            "  - deep:\n"
            "      - uses: o/first@v1\n"
            "  - uses: o/second@v1\n"
            "uses: o/third@v1\n"
        )
        refs = [s.raw_reference for s in iter_invocation_sites(load_document(text))]
        assert refs == ["o/first@v1", "o/second@v1", "o/third@v1"]

    def test_non_string_values_are_not_sites(self):
        text = "steps:\n  - uses: 42\n  - uses:\n  - uses: [a, b]\n"
        assert list(iter_invocation_sites(load_document(text))) == []

    def test_counts_every_site(self, ci_workflow_path):
        with open(ci_workflow_path, encoding="utf-8") as f:
            root = load_document(f.read())
        stats = RunStatistics()
        sites = list(iter_invocation_sites(root, stats))
        assert stats.sites_discovered == len(sites) == 8

    def test_is_lazy(self):
        stats = RunStatistics()
        walker = iter_invocation_sites(load_document("- uses: o/a@v1\n- uses: o/b@v1\n"), stats)
        assert stats.sites_discovered == 0
        next(walker)
        assert stats.sites_discovered == 1

    def test_scalar_root_has_no_sites(self):
        assert list(iter_invocation_sites(load_document("just a string"))) == []


# ---------------------------------------------------------------------------
# find_line
# ---------------------------------------------------------------------------

class TestFindLine:
    def test_first_match_is_one_based(self):
        lines = ["name: x\n", "  - uses: o/a@v1\n"]
        assert find_line(lines, "o/a@v1") == 2

    def test_not_found(self):
        assert find_line(["name: x\n"], "o/a@v1") is None

    def test_repeated_reference_reports_first_line(self):
        lines = ["- uses: o/a@v1\n", "- uses: o/a@v1\n"]
        assert find_line(lines, "o/a@v1") == 1


# ---------------------------------------------------------------------------
# discover_files
# ---------------------------------------------------------------------------

class TestDiscoverFiles:
    def test_repository_root(self, fixtures_root):
        files = discover_files(fixtures_root)
        names = [os.path.relpath(f, fixtures_root).replace(os.sep, "/") for f in files]
        assert names == [
            ".github/actions/setup/action.yml",
            ".github/workflows/ci.yml",
            ".github/workflows/pinned.yml",
        ]

    def test_without_composite_actions(self, fixtures_root):
        files = discover_files(fixtures_root, include_composite=False)
        assert all("workflows" in f for f in files)
        assert len(files) == 2

    def test_workflows_directory(self, workflows_dir):
        files = discover_files(workflows_dir)
        assert [os.path.basename(f) for f in files] == ["ci.yml", "pinned.yml"]

    def test_single_file(self, ci_workflow_path):
        assert discover_files(ci_workflow_path) == [ci_workflow_path]

    def test_missing_path(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            discover_files(str(tmp_path / "nope"))

    def test_empty_directory(self, tmp_path):
        assert discover_files(str(tmp_path)) == []

    def test_ignores_non_yaml(self, tmp_path):
        (tmp_path / "README.md").write_text("hi")
        (tmp_path / "ci.yaml").write_text("name: x\n")
        assert [os.path.basename(f) for f in discover_files(str(tmp_path))] == ["ci.yaml"]
