import logging
import os
import shutil
import sys
from pathlib import Path

import pytest

here = Path(__file__).resolve()
if str(here.parent) not in sys.path:
    sys.path.insert(0, str(here.parent))

import mod_classifier
from classifier_errors import InputDirectoryError, OutputDirectoryError
from mod_catalog import parse_catalog
from mod_classifier import ModAction, classify_mods, ensure_output_tree
from mod_models import ModCategory


SAMPLE_MODS = {
    "JEI-1.16.5-7.7.1.152.jar": ("jei.jar", ModCategory.CLIENT_AND_SERVER_REQUIRED),
    "[更好的钓鱼]BetterFishing-forge-1.20.1-2.0.0.jar": ("betterfishing.jar", ModCategory.CLIENT_OPTIONAL_SERVER_OPTIONAL),
    "AppleSkin-mc1.18-forge-2.4.0+mc1.18.jar": ("appleskin.jar", ModCategory.CLIENT_REQUIRED_SERVER_OPTIONAL),
    "1.12.2-JourneyMap-5.7.1.jar": ("journeymap.jar", ModCategory.CLIENT_ONLY),
    "Sodium for Fabric 0.5.3.jar": ("sodium.jar", ModCategory.CLIENT_OPTIONAL_SERVER_REQUIRED),
    "[我的世界·Iron Chests]ironchests-forge1.20.1-14.4.4.jar": ("ironchests.jar", ModCategory.SERVER_ONLY),
}


def _catalog():
    return parse_catalog([
        {"name": key, "type": category.value} for key, category in SAMPLE_MODS.values()
    ])


def _populate(input_dir: Path) -> dict[str, bytes]:
    input_dir.mkdir(parents=True, exist_ok=True)
    contents = {}
    for index, name in enumerate(SAMPLE_MODS):
        data = f"jar-{index}".encode("utf-8") * (index + 1)
        (input_dir / name).write_bytes(data)
        contents[name] = data
    return contents


def _info_messages(caplog, needle):
    return [r.getMessage() for r in caplog.records if r.levelno == logging.INFO and needle in r.getMessage()]


def test_ensure_output_tree_creates_all_category_dirs(tmp_path: Path):
    output_dir = tmp_path / "Output"
    ensure_output_tree(output_dir)
    assert sorted(p.name for p in output_dir.iterdir()) == sorted(ModCategory.directories())


def test_ensure_output_tree_fails_when_output_is_a_file(tmp_path: Path):
    output_dir = tmp_path / "Output"
    output_dir.write_text("not a folder", encoding="utf-8")
    with pytest.raises(OutputDirectoryError):
        ensure_output_tree(output_dir)


def test_end_to_end_classification_and_rerun(tmp_path: Path, caplog):
    caplog.set_level(logging.INFO)
    input_dir = tmp_path / "Input"
    output_dir = tmp_path / "Output"
    contents = _populate(input_dir)

    summary = classify_mods(_catalog(), input_dir, output_dir)

    assert summary.count(ModAction.COPIED) == len(SAMPLE_MODS)
    for name, (_, category) in SAMPLE_MODS.items():
        placed = [d.name for d in output_dir.iterdir() if (d / name).exists()]
        assert placed == [category.directory], f"{name} should only be in {category.directory}"
        assert (output_dir / category.directory / name).read_bytes() == contents[name]

    # Sources are untouched
    assert {p.name: p.read_bytes() for p in input_dir.iterdir()} == contents
    assert len(_info_messages(caplog, "Classified mod:")) == len(SAMPLE_MODS)

    caplog.clear()
    second = classify_mods(_catalog(), input_dir, output_dir)
    assert second.count(ModAction.SKIPPED_EXISTING) == len(SAMPLE_MODS)
    assert second.count(ModAction.COPIED) == 0
    assert len(_info_messages(caplog, "already present")) == len(SAMPLE_MODS)
    assert not _info_messages(caplog, "Classified mod:")


def test_unmatched_file_is_reported_and_not_copied(tmp_path: Path, caplog):
    input_dir = tmp_path / "Input"
    output_dir = tmp_path / "Output"
    input_dir.mkdir()
    (input_dir / "Mystery-Mod-1.0.0.jar").write_bytes(b"x")

    summary = classify_mods(_catalog(), input_dir, output_dir)

    assert summary.count(ModAction.UNMATCHED) == 1
    assert not any(p.is_file() for p in output_dir.rglob("*"))
    errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
    assert len(errors) == 1
    assert "Mystery-Mod-1.0.0.jar" in errors[0] and "mystery-mod.jar" in errors[0]


def test_two_files_with_same_key_are_both_copied(tmp_path: Path):
    input_dir = tmp_path / "Input"
    output_dir = tmp_path / "Output"
    input_dir.mkdir()
    names = ["JEI-1.16.5-7.7.1.152.jar", "jei-1.20.1-15.2.0.27.jar"]
    for name in names:
        (input_dir / name).write_bytes(name.encode("utf-8"))

    summary = classify_mods(_catalog(), input_dir, output_dir)

    assert summary.count(ModAction.COPIED) == 2
    target = output_dir / ModCategory.CLIENT_AND_SERVER_REQUIRED.directory
    assert sorted(p.name for p in target.iterdir()) == sorted(names)


def test_subdirectories_are_not_descended(tmp_path: Path):
    input_dir = tmp_path / "Input"
    output_dir = tmp_path / "Output"
    nested = input_dir / "JEI-1.16.5-7.7.1.152.jar"
    nested.mkdir(parents=True)
    (nested / "sodium.jar").write_bytes(b"x")

    summary = classify_mods(_catalog(), input_dir, output_dir)

    assert summary.total == 0
    assert not any(p.is_file() for p in output_dir.rglob("*"))


def test_dry_run_copies_nothing(tmp_path: Path):
    input_dir = tmp_path / "Input"
    output_dir = tmp_path / "Output"
    _populate(input_dir)

    summary = classify_mods(_catalog(), input_dir, output_dir, dry_run=True)

    assert summary.count(ModAction.WOULD_COPY) == len(SAMPLE_MODS)
    assert summary.to_dict()["dry_run"] is True
    assert not output_dir.exists()


def test_copy_failure_is_logged_and_processing_continues(tmp_path: Path, monkeypatch, caplog):
    input_dir = tmp_path / "Input"
    output_dir = tmp_path / "Output"
    _populate(input_dir)
    real_copy2 = shutil.copy2

    def flaky_copy2(src, dst, *args, **kwargs):
        if Path(src).name.startswith("JEI"):
            raise PermissionError("permission denied")
        return real_copy2(src, dst, *args, **kwargs)

    monkeypatch.setattr(mod_classifier.shutil, "copy2", flaky_copy2)

    summary = classify_mods(_catalog(), input_dir, output_dir)

    assert summary.count(ModAction.FAILED) == 1
    assert summary.count(ModAction.COPIED) == len(SAMPLE_MODS) - 1
    failed = [r for r in summary.results if r.action == ModAction.FAILED][0]
    assert failed.filename == "JEI-1.16.5-7.7.1.152.jar"
    assert not failed.destination.exists()
    assert any("Failed to classify mod JEI-1.16.5-7.7.1.152.jar" in r.getMessage() for r in caplog.records)


def test_directory_in_the_way_is_a_copy_failure(tmp_path: Path):
    input_dir = tmp_path / "Input"
    output_dir = tmp_path / "Output"
    input_dir.mkdir()
    (input_dir / "1.12.2-JourneyMap-5.7.1.jar").write_bytes(b"x")
    (output_dir / "ClientOnly" / "1.12.2-JourneyMap-5.7.1.jar").mkdir(parents=True)

    summary = classify_mods(_catalog(), input_dir, output_dir)

    assert summary.results[0].action == ModAction.FAILED


@pytest.mark.skipif(os.name == "nt", reason="symlinks need extra privileges on Windows")
def test_dangling_symlink_at_destination_is_replaced(tmp_path: Path):
    input_dir = tmp_path / "Input"
    output_dir = tmp_path / "Output"
    input_dir.mkdir()
    (input_dir / "1.12.2-JourneyMap-5.7.1.jar").write_bytes(b"journeymap")
    dest = output_dir / "ClientOnly" / "1.12.2-JourneyMap-5.7.1.jar"
    dest.parent.mkdir(parents=True)
    dest.symlink_to(tmp_path / "nowhere.jar")

    summary = classify_mods(_catalog(), input_dir, output_dir)

    assert summary.results[0].action == ModAction.COPIED
    assert not dest.is_symlink()
    assert dest.read_bytes() == b"journeymap"
    assert not (tmp_path / "nowhere.jar").exists()


def test_summary_dict_shape(tmp_path: Path):
    input_dir = tmp_path / "Input"
    output_dir = tmp_path / "Output"
    _populate(input_dir)
    (input_dir / "unknown-thing-2.0.jar").write_bytes(b"x")

    data = classify_mods(_catalog(), input_dir, output_dir).to_dict()

    assert data["total_mods"] == len(SAMPLE_MODS) + 1
    assert data["copied"] == len(SAMPLE_MODS)
    assert data["unmatched"] == 1
    jei = next(m for m in data["mods"] if m["filename"].startswith("JEI"))
    assert jei["key"] == "jei.jar"
    assert jei["category"] == "client_and_server_required"


@pytest.mark.skipif(os.name == "nt", reason="symlinks need extra privileges on Windows")
def test_symlink_to_existing_file_counts_as_already_present(tmp_path: Path):
    input_dir = tmp_path / "Input"
    output_dir = tmp_path / "Output"
    input_dir.mkdir()
    (input_dir / "1.12.2-JourneyMap-5.7.1.jar").write_bytes(b"new")
    elsewhere = tmp_path / "kept.jar"
    elsewhere.write_bytes(b"old")
    dest = output_dir / "ClientOnly" / "1.12.2-JourneyMap-5.7.1.jar"
    dest.parent.mkdir(parents=True)
    dest.symlink_to(elsewhere)

    summary = classify_mods(_catalog(), input_dir, output_dir)

    assert summary.results[0].action == ModAction.SKIPPED_EXISTING
    assert dest.is_symlink()
    assert elsewhere.read_bytes() == b"old"


def test_unreadable_input_dir_raises(tmp_path: Path, monkeypatch):
    input_dir = tmp_path / "Input"
    input_dir.mkdir()
    real_iterdir = Path.iterdir

    def denied_iterdir(self):
        if self == input_dir:
            raise PermissionError(13, "Permission denied", str(self))
        return real_iterdir(self)

    monkeypatch.setattr(Path, "iterdir", denied_iterdir)

    with pytest.raises(InputDirectoryError, match="Cannot read input folder"):
        classify_mods(_catalog(), input_dir, tmp_path / "Output")
