"""Tests for the nix-prefetch-git checksum collaborator."""

import subprocess
from unittest.mock import patch, MagicMock

import pytest

from common.prefetch import prefetch_git
from errors import PrefetchError


def completed(returncode=0, stdout="", stderr=""):
    proc = MagicMock()
    proc.returncode = returncode
    proc.stdout = stdout
    proc.stderr = stderr
    return proc


class TestPrefetchGit:
    @patch("common.prefetch.subprocess.run")
    def test_returns_sha256(self, mock_run):
        mock_run.return_value = completed(stdout='{"url": "u", "rev": "r", "sha256": "0abc"}')
        assert prefetch_git("https://example.com/x.git", "deadbeef") == "0abc"
        cmd = mock_run.call_args[0][0]
        assert cmd == ["nix-prefetch-git", "--quiet", "--url", "https://example.com/x.git", "--rev", "deadbeef"]

    @patch("common.prefetch.subprocess.run", side_effect=FileNotFoundError("nix-prefetch-git"))
    def test_missing_binary(self, _mock_run):
        with pytest.raises(PrefetchError, match="not found"):
            prefetch_git("u", "r")

    @patch("common.prefetch.subprocess.run", side_effect=subprocess.TimeoutExpired("nix-prefetch-git", 1))
    def test_timeout(self, _mock_run):
        with pytest.raises(PrefetchError, match="timed out"):
            prefetch_git("u", "r", timeout=1)

    @patch("common.prefetch.subprocess.run")
    def test_non_zero_exit(self, mock_run):
        mock_run.return_value = completed(returncode=1, stderr="fatal: repository not found")
        with pytest.raises(PrefetchError, match="repository not found"):
            prefetch_git("u", "r")

    @patch("common.prefetch.subprocess.run")
    def test_bad_output(self, mock_run):
        mock_run.return_value = completed(stdout="not json")
        with pytest.raises(PrefetchError):
            prefetch_git("u", "r")

    @patch("common.prefetch.subprocess.run")
    def test_output_without_sha256(self, mock_run):
        mock_run.return_value = completed(stdout='{"url": "u"}')
        with pytest.raises(PrefetchError, match="no sha256"):
            prefetch_git("u", "r")
