"""Unit tests for project archive extraction."""

import io
import zipfile

import pytest

from reelforge.ingest import ArchiveError, extract_project_files


def build_zip(entries: dict[str, bytes | str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, content in entries.items():
            zf.writestr(name, content)
    return buffer.getvalue()


class TestExtractProjectFiles:
    """Tests for extract_project_files."""

    def test_readme_first_and_filters(self):
        data = build_zip(
            {
                "src/": "",
                "src/app.py": "print('hi')",
                "assets/logo.png": b"\x89PNG\r\n",
                "docs/README.md": "# App",
                "package.json": '{"name": "app"}',
                "build/blob.txt": "abc\0def",
            }
        )

        files = extract_project_files(data)

        assert [f.name for f in files] == ["docs/README.md", "src/app.py", "package.json"]
        assert files[0].content == "# App"

    def test_extension_match_is_case_insensitive(self):
        files = extract_project_files(build_zip({"NOTES.TXT": "hello"}))
        assert [f.name for f in files] == ["NOTES.TXT"]

    def test_invalid_utf8_is_replaced(self):
        files = extract_project_files(build_zip({"a.txt": b"caf\xe9"}))
        assert files[0].content == "caf\ufffd"

    def test_file_limit(self):
        data = build_zip({f"f{i}.py": "x" for i in range(5)})
        assert len(extract_project_files(data, max_files=2)) == 2

    def test_size_limit_stops_after_crossing(self):
        data = build_zip({"a.md": "x" * 10, "b.md": "y" * 10, "c.md": "z" * 10})

        files = extract_project_files(data, max_total_chars=15)

        assert [f.name for f in files] == ["a.md", "b.md"]

    def test_accepts_path_and_file_object(self, tmp_path):
        data = build_zip({"README.md": "# Hi"})
        path = tmp_path / "project.zip"
        path.write_bytes(data)

        assert extract_project_files(path)[0].name == "README.md"
        assert extract_project_files(str(path))[0].name == "README.md"
        assert extract_project_files(io.BytesIO(data))[0].name == "README.md"

    def test_corrupt_archive(self):
        with pytest.raises(ArchiveError):
            extract_project_files(b"definitely not a zip")
