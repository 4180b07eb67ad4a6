"""Tests for loading example source files."""

import pytest

from snapshotter.errors import DuplicateDescriptionError, UnknownViewportError
from snapshotter.loader import expand_source_files, load_examples


class TestExpandSourceFiles:
    def test_plain_paths_in_order(self, tmp_path):
        (tmp_path / "b.py").write_text("")
        (tmp_path / "a.py").write_text("")
        assert expand_source_files(["b.py", "a.py"], tmp_path) == [tmp_path / "b.py", tmp_path / "a.py"]

    def test_glob_sorted(self, tmp_path):
        folder = tmp_path / "examples"
        folder.mkdir()
        for name in ("z.py", "a.py", "m.py"):
            (folder / name).write_text("")
        files = expand_source_files(["examples/*.py"], tmp_path)
        assert [f.name for f in files] == ["a.py", "m.py", "z.py"]

    def test_repeats_dropped(self, tmp_path):
        (tmp_path / "a.py").write_text("")
        assert expand_source_files(["a.py", "*.py"], tmp_path) == [tmp_path / "a.py"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            expand_source_files(["missing.py"], tmp_path)

    def test_glob_without_matches(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            expand_source_files(["examples/*.py"], tmp_path)


class TestLoadExamples:
    def test_defines_examples(self, tmp_path, registry, write_examples):
        write_examples(
            "snapshot.define('foo', lambda: '<div>Foo</div>')\n"
            "snapshot.define('bar', lambda: '<div>Bar</div>', {'viewports': ['small']})\n"
        )
        load_examples(["examples.py"], registry, tmp_path)
        assert [e.description for e in registry.examples] == ["foo", "bar"]
        assert registry.examples[1].viewport_names == ["small"]

    def test_fdefine_available(self, tmp_path, registry, write_examples):
        write_examples("snapshot.fdefine('fiz', lambda: '<div>Fiz</div>')\n")
        load_examples(["examples.py"], registry, tmp_path)
        assert registry.has_focused

    def test_duplicate_across_files_aborts(self, tmp_path, registry, write_examples):
        write_examples("snapshot.define('foo', lambda: '<div>Foo</div>')\n", "one.py")
        write_examples("snapshot.define('foo', lambda: '<div>Bar</div>')\n", "two.py")
        with pytest.raises(DuplicateDescriptionError) as exc:
            load_examples(["one.py", "two.py"], registry, tmp_path)
        assert 'Error while defining "foo"' in str(exc.value)

    def test_unknown_viewport_aborts(self, tmp_path, registry, write_examples):
        write_examples("snapshot.define('foo', lambda: '<div/>', {'viewports': ['huge']})\n")
        with pytest.raises(UnknownViewportError):
            load_examples(["examples.py"], registry, tmp_path)

    def test_examples_can_use_async_and_callbacks(self, tmp_path, registry, write_examples):
        write_examples(
            "import asyncio\n"
            "\n"
            "async def render():\n"
            "    await asyncio.sleep(0)\n"
            "    return '<div>Async</div>'\n"
            "\n"
            "def render_later(done):\n"
            "    done('<div>Later</div>')\n"
            "\n"
            "snapshot.define('async', render)\n"
            "snapshot.define('callback', render_later)\n"
        )
        load_examples(["examples.py"], registry, tmp_path)
        assert [e.strategy.value for e in registry.examples] == ["awaitable", "callback"]
