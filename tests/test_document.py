"""
Tests for permissions document merging.

Feature: reposync
"""

import json
import os
import shutil
import subprocess
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from reposync.document import (
    JqMerger,
    NativeMerger,
    build_batch,
    load_document,
    merge_repositories,
    render_document,
    select_merger,
    update_document,
    write_document_atomic,
)
from reposync.exceptions import DocumentIOError, NoBackendError
from reposync.testing import create_spec
from reposync.types.permissions import PermissionMode

requires_jq = pytest.mark.skipif(shutil.which("jq") is None, reason="jq not installed")

# Strategies for JSON-like documents
json_scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(min_value=-(2**31), max_value=2**31),
    st.integers(min_value=-(10**30), max_value=10**30),
    st.floats(allow_nan=False, allow_infinity=False),
    st.text(max_size=20),
)
json_values = st.recursive(
    json_scalars,
    lambda children: st.one_of(
        st.lists(children, max_size=3),
        st.dictionaries(st.text(max_size=10), children, max_size=3),
    ),
    max_leaves=10,
)
key_strategy = st.sampled_from(["acme/a", "acme/b", "octocat/c", "initech/d"])
permission_strategy = st.sampled_from(
    [
        {"permissions": "write-all"},
        {"permissions": {"contents": "write"}},
        {"permissions": {"actions": "write", "contents": "write", "packages": "read", "workflows": "write"}},
    ]
)
batch_strategy = st.dictionaries(key_strategy, permission_strategy, max_size=4)
ABSENT = object()


@st.composite
def documents(draw: st.DrawFn, empty_repositories: bool = False) -> dict[str, Any]:
    """
    Documents with arbitrary siblings at every level of the owned path.

    With ``empty_repositories`` the repositories value may also be false or
    null, or be left out.
    """
    repositories: Any = draw(st.dictionaries(key_strategy, json_values, max_size=3))
    if empty_repositories:
        repositories = draw(st.sampled_from([repositories, False, None, ABSENT]))
    codespaces = draw(st.dictionaries(st.sampled_from(["openFiles", "x"]), json_values, max_size=2))
    if repositories is not ABSENT:
        codespaces["repositories"] = repositories
    customizations = draw(st.dictionaries(st.sampled_from(["vscode", "jetbrains"]), json_values, max_size=2))
    customizations["codespaces"] = codespaces
    document = draw(st.dictionaries(st.sampled_from(["name", "image", "features"]), json_values, max_size=3))
    document["customizations"] = customizations
    return document


@given(document=documents(empty_repositories=True), batch=batch_strategy)
@settings(max_examples=100)
def test_merge_is_idempotent(document: dict[str, Any], batch: dict[str, Any]) -> None:
    """Property: merging the same batch twice equals merging it once."""
    once = merge_repositories(document, batch)
    assert merge_repositories(once, batch) == once


@given(document=documents(empty_repositories=True), batch=batch_strategy)
@settings(max_examples=100)
def test_merge_preserves_everything_outside_repositories(
    document: dict[str, Any], batch: dict[str, Any]
) -> None:
    """Property: every key outside customizations.codespaces.repositories is untouched."""
    merged = merge_repositories(document, batch)

    for key in document:
        if key != "customizations":
            assert merged[key] == document[key]
    for key in document["customizations"]:
        if key != "codespaces":
            assert merged["customizations"][key] == document["customizations"][key]
    for key in document["customizations"]["codespaces"]:
        if key != "repositories":
            assert merged["customizations"]["codespaces"][key] == document["customizations"]["codespaces"][key]


@given(document=documents(), batch=batch_strategy)
@settings(max_examples=100)
def test_merge_is_shallow_override(document: dict[str, Any], batch: dict[str, Any]) -> None:
    """Property: batch keys replace whole entries; other entries are kept."""
    before = document["customizations"]["codespaces"]["repositories"]
    after = merge_repositories(document, batch)["customizations"]["codespaces"]["repositories"]

    for key, value in batch.items():
        assert after[key] == value
    for key, value in before.items():
        if key not in batch:
            assert after[key] == value
    assert set(after) == set(before) | set(batch)


@given(document=documents(empty_repositories=True), batch=batch_strategy)
@settings(max_examples=50)
def test_merge_does_not_mutate_inputs(document: dict[str, Any], batch: dict[str, Any]) -> None:
    snapshot = json.loads(json.dumps(document))
    batch_snapshot = json.loads(json.dumps(batch))
    merge_repositories(document, batch)
    assert document == snapshot
    assert batch == batch_snapshot


class TestBuildBatch:
    def test_contents_mode_into_empty_document(self) -> None:
        """Scenario: contents mode on acme/new-svc into an empty document."""
        batch = build_batch([create_spec("acme/new-svc")], PermissionMode.CONTENTS)
        assert batch == {"acme/new-svc": {"permissions": {"contents": "write"}}}

        document = merge_repositories({}, batch)
        assert document == {
            "customizations": {
                "codespaces": {
                    "repositories": {"acme/new-svc": {"permissions": {"contents": "write"}}}
                }
            }
        }

    def test_all_mode(self) -> None:
        batch = build_batch([create_spec("acme/a")], "all")
        assert batch == {"acme/a": {"permissions": "write-all"}}

    def test_default_mode(self) -> None:
        batch = build_batch([create_spec("acme/a"), create_spec("acme/b", "dev")])
        assert batch["acme/b"] == {
            "permissions": {
                "actions": "write",
                "contents": "write",
                "packages": "read",
                "workflows": "write",
            }
        }
        assert batch["acme/a"] is not batch["acme/b"]


class TestMergeRepositories:
    def test_synthesizes_missing_document(self) -> None:
        batch = {"acme/a": {"permissions": "write-all"}}
        assert merge_repositories(None, batch) == {
            "customizations": {"codespaces": {"repositories": batch}}
        }

    def test_null_repositories_treated_as_empty(self) -> None:
        document = {"customizations": {"codespaces": {"repositories": None}}}
        merged = merge_repositories(document, {"acme/a": {"permissions": "write-all"}})
        assert merged["customizations"]["codespaces"]["repositories"] == {
            "acme/a": {"permissions": "write-all"}
        }

    def test_existing_entry_replaced_not_deep_merged(self) -> None:
        document = {
            "customizations": {
                "codespaces": {
                    "repositories": {
                        "acme/a": {"permissions": {"actions": "write", "issues": "read"}}
                    }
                }
            }
        }
        merged = merge_repositories(document, {"acme/a": {"permissions": {"contents": "write"}}})
        assert merged["customizations"]["codespaces"]["repositories"]["acme/a"] == {
            "permissions": {"contents": "write"}
        }

    def test_non_object_on_path_rejected(self) -> None:
        with pytest.raises(DocumentIOError, match="'customizations'"):
            merge_repositories({"customizations": []}, {"acme/a": {}})

    def test_false_repositories_treated_as_empty(self) -> None:
        document = {"customizations": {"codespaces": {"repositories": False}}}
        merged = merge_repositories(document, {"acme/a": {"permissions": "write-all"}})
        assert merged["customizations"]["codespaces"]["repositories"] == {
            "acme/a": {"permissions": "write-all"}
        }

    @pytest.mark.parametrize("stored", [0, "", [], True])
    def test_other_non_object_repositories_rejected(self, stored: Any) -> None:
        document = {"customizations": {"codespaces": {"repositories": stored}}}
        with pytest.raises(DocumentIOError, match="'repositories'"):
            merge_repositories(document, {"acme/a": {}})

    def test_false_on_path_rejected(self) -> None:
        with pytest.raises(DocumentIOError, match="'codespaces'"):
            merge_repositories({"customizations": {"codespaces": False}}, {"acme/a": {}})


class TestBackends:
    def test_native_always_available(self) -> None:
        assert NativeMerger().available()

    def test_jq_unavailable_falls_back_to_native(self) -> None:
        backend = select_merger([JqMerger(executable="definitely-not-jq"), NativeMerger()])
        assert backend.name == "native"

    def test_jq_preferred_when_available(self) -> None:
        with patch("reposync.document.shutil.which", return_value="/usr/bin/jq"):
            assert select_merger().name == "jq"

    def test_no_backend(self) -> None:
        with pytest.raises(NoBackendError, match="No JSON tool found"):
            select_merger([JqMerger(executable="definitely-not-jq")])

    def test_prefer_unknown_backend(self) -> None:
        with pytest.raises(NoBackendError, match="Unknown backend"):
            select_merger(prefer="rscript")

    def test_prefer_native(self) -> None:
        assert select_merger(prefer="native").name == "native"

    @requires_jq
    @given(document=documents(empty_repositories=True), batch=batch_strategy)
    @settings(max_examples=25, deadline=None)
    def test_jq_matches_native(self, document: dict[str, Any], batch: dict[str, Any]) -> None:
        """Property: both backends render byte-for-byte identical documents."""
        jq = render_document(JqMerger().merge(document, batch))
        native = render_document(NativeMerger().merge(document, batch))
        assert jq == native

    def test_jq_only_sees_repositories_value(self) -> None:
        document = {
            "version": 1.0,
            "id": 12345678901234567890,
            "customizations": {
                "codespaces": {"ratio": 2.50, "repositories": {"acme/old": {"weight": 1.0}}}
            },
        }
        batch = {"acme/a": {"permissions": "write-all"}}
        # jq 1.6 prints 1.0 as 1
        rewritten = '{"acme/old": {"weight": 1}, "acme/a": {"permissions": "write-all"}}'
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout=rewritten, stderr="")

        with patch("reposync.document.subprocess.run", return_value=completed) as run:
            merged = JqMerger().merge(document, batch)

        assert run.call_args.kwargs["input"] == json.dumps({"acme/old": {"weight": 1.0}})
        assert render_document(merged) == render_document(NativeMerger().merge(document, batch))
        rendered = render_document(merged)
        assert '"version": 1.0' in rendered
        assert '"id": 12345678901234567890' in rendered
        assert '"weight": 1.0' in rendered

    def test_jq_failure_becomes_document_error(self) -> None:
        error = subprocess.CalledProcessError(5, ["jq"], stderr="jq: error: object and number cannot be added\n")
        with patch("reposync.document.subprocess.run", side_effect=error):
            with pytest.raises(DocumentIOError, match="cannot be added"):
                JqMerger().merge({"customizations": {"codespaces": {"repositories": 0}}}, {})

    @requires_jq
    def test_jq_keeps_sibling_numbers(self) -> None:
        document = {
            "version": 1.0,
            "id": 12345678901234567890,
            "customizations": {"codespaces": {"repositories": {"acme/old": {"weight": 0.5e1}}}},
        }
        batch = {"acme/a": {"permissions": "write-all"}}
        assert render_document(JqMerger().merge(document, batch)) == render_document(
            NativeMerger().merge(document, batch)
        )

    @requires_jq
    @pytest.mark.parametrize("stored", [False, None])
    def test_jq_empty_repositories_matches_native(self, stored: Any) -> None:
        document = {"customizations": {"codespaces": {"repositories": stored}}}
        batch = {"acme/a": {"permissions": "write-all"}}
        assert JqMerger().merge(document, batch) == NativeMerger().merge(document, batch)

    @requires_jq
    def test_jq_rejects_what_native_rejects(self) -> None:
        document = {"customizations": {"codespaces": {"repositories": [1]}}}
        with pytest.raises(DocumentIOError):
            NativeMerger().merge(document, {"acme/a": {}})
        with pytest.raises(DocumentIOError):
            JqMerger().merge(document, {"acme/a": {}})

    @requires_jq
    def test_jq_synthesizes_missing_document(self) -> None:
        batch = {"acme/a": {"permissions": "write-all"}}
        assert JqMerger().merge(None, batch) == NativeMerger().merge(None, batch)


class TestDocumentIO:
    def test_load_missing_returns_none(self, tmp_path: Path) -> None:
        assert load_document(tmp_path / "missing.json") is None

    def test_load_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "devcontainer.json"
        path.write_text("{ not json")
        with pytest.raises(DocumentIOError, match="Invalid JSON"):
            load_document(path)

    def test_load_non_object(self, tmp_path: Path) -> None:
        path = tmp_path / "devcontainer.json"
        path.write_text("[]")
        with pytest.raises(DocumentIOError, match="does not contain a JSON object"):
            load_document(path)

    def test_atomic_write_leaves_no_temp_files(self, tmp_path: Path) -> None:
        path = tmp_path / ".devcontainer" / "devcontainer.json"
        write_document_atomic(path, {"name": "dev"})

        assert json.loads(path.read_text()) == {"name": "dev"}
        assert path.read_text().endswith("}\n")
        assert os.listdir(path.parent) == ["devcontainer.json"]

    def test_atomic_write_failure_keeps_original(self, tmp_path: Path) -> None:
        path = tmp_path / "devcontainer.json"
        path.write_text('{"name": "original"}')

        with patch("reposync.document.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(DocumentIOError, match="disk full"):
                write_document_atomic(path, {"name": "new"})

        assert json.loads(path.read_text()) == {"name": "original"}
        assert os.listdir(tmp_path) == ["devcontainer.json"]


class TestUpdateDocument:
    def test_in_place(self, devcontainer_file: Path, sample_document: dict[str, Any]) -> None:
        specs = [create_spec("acme/new-svc"), create_spec("acme/legacy")]

        document = update_document(
            devcontainer_file, specs, PermissionMode.CONTENTS, merger=NativeMerger()
        )

        on_disk = json.loads(devcontainer_file.read_text())
        assert on_disk == document
        repositories = on_disk["customizations"]["codespaces"]["repositories"]
        assert repositories == {
            "acme/legacy": {"permissions": {"contents": "write"}},
            "acme/new-svc": {"permissions": {"contents": "write"}},
        }
        assert on_disk["customizations"]["vscode"] == sample_document["customizations"]["vscode"]
        assert on_disk["image"] == sample_document["image"]

    def test_dry_run_does_not_write(self, devcontainer_file: Path) -> None:
        before = devcontainer_file.read_text()

        document = update_document(
            devcontainer_file, [create_spec("acme/x")], merger=NativeMerger(), dry_run=True
        )

        assert devcontainer_file.read_text() == before
        assert "acme/x" in document["customizations"]["codespaces"]["repositories"]

    def test_synthesizes_when_absent(self, tmp_path: Path) -> None:
        path = tmp_path / ".devcontainer" / "devcontainer.json"
        update_document(path, [create_spec("acme/x")], "all", merger=NativeMerger())
        assert json.loads(path.read_text()) == {
            "customizations": {"codespaces": {"repositories": {"acme/x": {"permissions": "write-all"}}}}
        }
