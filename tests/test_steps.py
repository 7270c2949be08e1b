"""
Tests for the directory, patch and .env step runners.
"""

import sys

import pytest

from nodescaffold.cache import StepCache
from nodescaffold.dsl import env_file, locate, mkdir, patch, target
from nodescaffold.errors import MissingPrerequisite, VerificationFailed
from nodescaffold.step_workflows import directory, envfile
from nodescaffold.step_workflows import patch as patch_step
from nodescaffold.step_workflows.patch import patch_lines


@pytest.fixture
def base(project):
    d = project / "demo"
    d.mkdir()
    return d


class TestEnsureDirectory:
    def test_creates_and_records(self, ctx, base):
        cache = StepCache("demo")
        step = mkdir("queues")
        assert directory.run_step(target("demo", step), step, base, cache, ctx) is True
        assert (base / "queues").is_dir()
        assert cache.is_directory_done("queues")

    def test_existing_directory_is_only_recorded(self, ctx, base):
        (base / "files").mkdir()
        cache = StepCache("demo")
        step = mkdir("files")
        assert directory.run_step(target("demo", step), step, base, cache, ctx) is False
        assert cache.is_directory_done("files")

    def test_cached_but_removed_is_recreated(self, ctx, base):
        cache = StepCache("demo")
        cache.mark_directory_done("files")
        step = mkdir("files")
        assert directory.run_step(target("demo", step), step, base, cache, ctx) is True
        assert (base / "files").is_dir()

    def test_file_in_the_way(self, ctx, base):
        (base / "queues").write_text("")
        cache = StepCache("demo")
        step = mkdir("queues")
        with pytest.raises(VerificationFailed) as exc:
            directory.run_step(target("demo", step), step, base, cache, ctx)
        assert exc.value.step == "Directory 'queues'"
        assert not cache.is_directory_done("queues")
        assert ctx.checks.failed == 1


PACKAGE_JSON = """{
  "scripts": {
    "start": "node ./bin/www"
  }
}
"""


class TestPatchFile:
    def test_patch_lines(self):
        text, count = patch_lines("a\nb\r\nc", "b", "B1\nB2")
        assert text == "a\nB1\nB2\r\nc"
        assert count == 1

    def test_patches_once(self, ctx, base):
        pkg = base / "package.json"
        pkg.write_text(PACKAGE_JSON, encoding="utf-8")
        step = patch("package.json", '    "start": "node ./bin/www"', '    "start": "nodemon ./bin/www"')
        cache = StepCache("demo")
        t = target("demo", step)

        assert patch_step.run_step(t, step, base, cache, ctx) is True
        assert '"start": "nodemon ./bin/www"' in pkg.read_text(encoding="utf-8")

        pkg.write_text(PACKAGE_JSON, encoding="utf-8")
        assert patch_step.run_step(t, step, base, cache, ctx) is False
        assert '"start": "node ./bin/www"' in pkg.read_text(encoding="utf-8")

    def test_missing_file(self, ctx, base):
        step = patch("package.json", "x", "y")
        with pytest.raises(VerificationFailed):
            patch_step.run_step(target("demo", step), step, base, StepCache("demo"), ctx)
        assert ctx.checks.failed == 1

    def test_undecodable_file(self, ctx, base):
        (base / "package.json").write_bytes(b"\xff\xfe\x00broken")
        step = patch("package.json", "x", "y")
        cache = StepCache("demo")
        with pytest.raises(VerificationFailed):
            patch_step.run_step(target("demo", step), step, base, cache, ctx)
        assert not cache.is_file_done("package.json")
        assert ctx.checks.failed == 1


def _fake_executable(directory, name):
    directory.mkdir(parents=True, exist_ok=True)
    exe = directory / name
    exe.write_text("#!/bin/sh\n")
    exe.chmod(0o755)
    return exe


class TestWriteEnvFile:
    @pytest.mark.skipif(sys.platform == "win32", reason="PATHEXT lookup")
    def test_locates_and_writes(self, make_ctx, base, tmp_path):
        ffmpeg = _fake_executable(tmp_path / "bin", "ffmpeg")
        ffprobe = _fake_executable(base / "node_modules" / "ffprobe-static" / "bin" / "linux" / "x64", "ffprobe")
        ctx = make_ctx(env={"PATH": str(tmp_path / "bin")})
        step = env_file(
            ".env",
            locate("FFMPEG_PATH", "ffmpeg", str(tmp_path / "nowhere")),
            locate("FFPROBE_PATH", "ffprobe", "node_modules", use_path=False),
        )
        cache = StepCache("demo")

        assert envfile.run_step(target("demo", step), step, base, cache, ctx) is True

        lines = (base / ".env").read_text(encoding="utf-8").splitlines()
        assert lines[0] == f"FFMPEG_PATH='{ffmpeg}'"
        assert lines[1] == f"FFPROBE_PATH='{ffprobe}'"
        assert cache.is_file_done(".env")

    def test_existing_env_is_kept(self, ctx, base):
        (base / ".env").write_text("FFMPEG_PATH='/custom'\n", encoding="utf-8")
        step = env_file(".env", locate("FFMPEG_PATH", "no-such-tool", "node_modules"))
        assert envfile.run_step(target("demo", step), step, base, StepCache("demo"), ctx) is False
        assert (base / ".env").read_text(encoding="utf-8") == "FFMPEG_PATH='/custom'\n"

    def test_missing_executable(self, make_ctx, base):
        ctx = make_ctx(env={"PATH": ""})
        (base / "node_modules").mkdir()
        step = env_file(".env", locate("FFPROBE_PATH", "ffprobe", "node_modules", use_path=False))
        with pytest.raises(MissingPrerequisite) as exc:
            envfile.run_step(target("demo", step), step, base, StepCache("demo"), ctx)
        assert exc.value.details["tool"] == "ffprobe"
        assert not (base / ".env").exists()

    @pytest.mark.skipif(sys.platform == "win32", reason="executable bit")
    def test_unwritable_location(self, make_ctx, base):
        _fake_executable(base / "node_modules", "ffprobe")
        (base / "conf").write_text("")
        ctx = make_ctx(env={"PATH": ""})
        step = env_file("conf/.env", locate("FFPROBE_PATH", "ffprobe", "node_modules", use_path=False))
        with pytest.raises(VerificationFailed) as exc:
            envfile.run_step(target("demo", step), step, base, StepCache("demo"), ctx)
        assert exc.value.step == "Env file 'conf/.env'"
        assert ctx.checks.failed == 1

    def test_last_match_wins(self, tmp_path):
        _fake_executable(tmp_path / "a", "ffprobe")
        last = _fake_executable(tmp_path / "b", "ffprobe")
        assert envfile.find_executables(tmp_path, "ffprobe")[-1] == last

    def test_windows_suffix(self):
        assert envfile._executable_name("ffmpeg", "win32") == "ffmpeg.exe"
        assert envfile._executable_name("ffmpeg", "linux") == "ffmpeg"
