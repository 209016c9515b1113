"""Tests for writing sources and input files into a workspace."""

import asyncio

import pytest

from code_runner.errors import ValidationError
from code_runner.models.language import Language
from code_runner.services.materializer import (
    INPUT_FILE_NAME,
    SourceMaterializer,
    source_file_name,
)
from code_runner.services.workspace import Workspace

JAVA_HELLO = 'class Hello { public static void main(String[] a){ System.out.println("hi"); } }'


@pytest.fixture
def workspace(tmp_path):
    path = tmp_path / "ws"
    path.mkdir()
    return Workspace(token="ws", path=path)


def materialize(workspace, code, language, input_lines=None):
    return asyncio.run(
        SourceMaterializer().materialize(workspace, code, language, input_lines)
    )


class TestSourceFileName:

    @pytest.mark.parametrize("language, expected", [
        (Language.PYTHON, "Program.py"),
        (Language.JAVASCRIPT, "Program.js"),
        (Language.C, "Program.c"),
        (Language.CPP, "Program.cpp"),
        (Language.CSHARP, "Program.cs"),
    ])
    def test_fixed_names(self, language, expected):
        """Test non-Java languages use Program.<ext>."""
        assert source_file_name(language, "whatever") == expected

    def test_java_uses_first_class_name(self):
        """Test the first declared class names the Java file."""
        code = "public class Main { }\nclass Helper { }"
        assert source_file_name(Language.JAVA, code) == "Main.java"

    def test_java_identifier_characters(self):
        """Test identifiers with $ and _ are accepted."""
        assert source_file_name(Language.JAVA, "class $My_Class1 {}") == "$My_Class1.java"

    def test_java_without_class(self):
        """Test Java code without a class declaration is rejected."""
        with pytest.raises(ValidationError) as exc:
            source_file_name(Language.JAVA, "interface Foo {}")
        assert exc.value.response_code == 400
        assert exc.value.output == "Invalid Java code. Class name is missing."


class TestSourceMaterializer:

    def test_writes_code_verbatim(self, workspace):
        """Test the source file holds the submitted code unchanged."""
        code = "print('a')\r\nprint('b')\n"
        result = materialize(workspace, code, "python")

        assert result.source_path == workspace.path / "Program.py"
        assert result.source_path.read_bytes() == code.encode("utf-8")
        assert result.input_path is None

    def test_java_file_named_after_class(self, workspace):
        """Test Java source lands in <Class>.java."""
        result = materialize(workspace, JAVA_HELLO, "Java")
        assert result.source_path.name == "Hello.java"

    def test_input_joined_by_newline(self, workspace):
        """Test input lines are written newline-joined to input.txt."""
        result = materialize(workspace, "x", "python", ["3", "4", "hello world"])

        assert result.input_path == workspace.path / INPUT_FILE_NAME
        assert result.input_path.read_text() == "3\n4\nhello world"

    def test_empty_input_writes_no_file(self, workspace):
        """Test an empty input list produces no input file."""
        result = materialize(workspace, "x", "python", [])

        assert result.input_path is None
        assert not (workspace.path / INPUT_FILE_NAME).exists()

    def test_unsupported_language(self, workspace):
        """Test unknown languages are rejected without writing anything."""
        with pytest.raises(ValidationError) as exc:
            materialize(workspace, "puts 1", "ruby")

        assert exc.value.output == "Unsupported language."
        assert list(workspace.path.iterdir()) == []
