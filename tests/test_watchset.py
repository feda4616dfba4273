"""Tests for watch handle bookkeeping."""
import pytest

from watchrun.errors import WatchRegistrationError
from watchrun.watch.watchset import WatchSet, iter_files


def handler(event):
    pass


def test_add_registers_handle(subsystem, tree):
    watch_set = WatchSet(subsystem)
    handle = watch_set.add(tree / "README", handler)

    assert handle in watch_set
    assert watch_set.is_active(handle)
    assert watch_set.paths() == {tree / "README"}


def test_add_missing_path_fails(subsystem, tmp_path):
    watch_set = WatchSet(subsystem)

    with pytest.raises(WatchRegistrationError):
        watch_set.add(tmp_path / "missing", handler)

    assert len(watch_set) == 0


def test_iter_files_walks_whole_tree(tree):
    assert iter_files(tree) == sorted([
        tree / "README",
        tree / "src" / "main.c",
        tree / "src" / "pkg" / "util.c",
    ])


def test_add_recursive_expands_directories(subsystem, tree):
    watch_set = WatchSet(subsystem)
    handles = watch_set.add_recursive(tree, handler, recursive=True)

    assert len(handles) == 3
    assert watch_set.paths() == set(iter_files(tree))


def test_add_recursive_without_recursion_watches_root(subsystem, tree):
    watch_set = WatchSet(subsystem)
    handles = watch_set.add_recursive(tree, handler, recursive=False)

    assert len(handles) == 1
    assert watch_set.paths() == {tree}


def test_add_recursive_on_file_watches_file(subsystem, tree):
    watch_set = WatchSet(subsystem)
    watch_set.add_recursive(tree / "README", handler, recursive=True)

    assert watch_set.paths() == {tree / "README"}


def test_snapshot_and_clear_then_restore_watches_same_paths(subsystem, tree):
    watch_set = WatchSet(subsystem)
    watch_set.add_recursive(tree, handler)
    before_paths = watch_set.paths()
    before_handles = set(watch_set)

    descriptors = watch_set.snapshot_and_clear()

    assert len(watch_set) == 0
    assert subsystem.subscriptions == {}
    assert {d.path for d in descriptors} == before_paths
    assert all(d.callback is handler for d in descriptors)

    watch_set.restore(descriptors)

    assert watch_set.paths() == before_paths
    assert len(subsystem.subscriptions) == len(before_paths)
    assert not (set(watch_set) & before_handles)


def test_restore_skips_deleted_paths_when_asked(subsystem, tree):
    watch_set = WatchSet(subsystem)
    watch_set.add_recursive(tree, handler)
    descriptors = watch_set.snapshot_and_clear()
    (tree / "README").unlink()

    watch_set.restore(descriptors, skip_missing=True)

    assert tree / "README" not in watch_set.paths()
    assert len(watch_set) == 2


def test_restore_fails_on_deleted_path_by_default(subsystem, tree):
    watch_set = WatchSet(subsystem)
    watch_set.add(tree / "README", handler)
    descriptors = watch_set.snapshot_and_clear()
    (tree / "README").unlink()

    with pytest.raises(WatchRegistrationError):
        watch_set.restore(descriptors)


def test_remove_all(subsystem, tree):
    watch_set = WatchSet(subsystem)
    watch_set.add_recursive(tree, handler)

    assert watch_set.remove_all() == 3
    assert len(watch_set) == 0
    assert subsystem.subscriptions == {}


def test_restore_can_skip_rejected_paths(subsystem, tree):
    watch_set = WatchSet(subsystem)
    watch_set.add_recursive(tree, handler)
    descriptors = watch_set.snapshot_and_clear()
    subsystem.fail_paths.add(tree / "README")

    handles = watch_set.restore(descriptors, skip_failed=True)

    assert len(handles) == 2
    assert tree / "README" not in watch_set.paths()


def test_restore_rejected_path_fails_by_default(subsystem, tree):
    watch_set = WatchSet(subsystem)
    watch_set.add(tree / "README", handler)
    descriptors = watch_set.snapshot_and_clear()
    subsystem.fail_paths.add(tree / "README")

    with pytest.raises(WatchRegistrationError):
        watch_set.restore(descriptors)
