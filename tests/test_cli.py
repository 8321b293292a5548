"""Tests for the discharge-letter command line."""
import json

import pytest

from discharge_letter_generation import cli
from discharge_letter_generation.core.enums import AttachmentCategory
from discharge_letter_generation.pipeline import DischargeLetterPipeline


@pytest.fixture
def env_file(clean_env):
    return clean_env[1]


class TestParseAttachments:
    """Tests for --attach parsing."""

    def test_last_one_wins(self):
        """Test that repeated categories keep the last path."""
        parsed = cli.parse_attachments(["lab=a.pdf", "preop=x.png", "lab=b.pdf"])

        assert list(parsed) == [AttachmentCategory.PREOP, AttachmentCategory.LAB]
        assert str(parsed[AttachmentCategory.LAB]) == "b.pdf"

    @pytest.mark.parametrize("value", ["lab", "lab=", "xray=a.png"])
    def test_invalid_values(self, value):
        """Test malformed values and unknown categories."""
        with pytest.raises(ValueError):
            cli.parse_attachments([value])


class TestMain:
    """Tests for main()."""

    def test_dry_run_prints_request(self, env_file, tmp_path, capsys):
        """Test that --dry-run works without a key and prints the prompt."""
        form = tmp_path / "form.json"
        form.write_text(
            json.dumps(
                {
                    "patient": {"firstName": "Anna", "lastName": "Muster", "dob": "1980-01-01"},
                    "clinical": {"diagnosis": "Appendicitis"},
                    "config": {"language": "en", "audience": "patient"},
                }
            )
        )

        code = cli.main(["--env-file", env_file, "--form", str(form), "--dry-run"])

        out = capsys.readouterr().out
        assert code == cli.EXIT_OK
        assert "Anna Muster" in out
        assert "OUTPUT LANGUAGE: ENGLISH" in out

    def test_flags_override_form(self, env_file, tmp_path, capsys):
        """Test that flags are applied on top of the form file."""
        form = tmp_path / "form.json"
        form.write_text(json.dumps({"clinical": {"diagnosis": "Appendicitis"}}))

        cli.main(
            ["--env-file", env_file, "--form", str(form), "--diagnosis", "Cholecystitis", "--dry-run"]
        )

        out = capsys.readouterr().out
        assert "Cholecystitis" in out
        assert "Appendicitis" not in out

    def test_missing_key_exits_with_generation_error(self, env_file, capsys):
        """Test exit code 1 and the message when no key is configured."""
        code = cli.main(["--env-file", env_file, "--first-name", "Anna"])

        assert code == cli.EXIT_GENERATION_ERROR
        assert "API Key is missing." in capsys.readouterr().err

    def test_bad_form_file_is_input_error(self, env_file, tmp_path):
        """Test exit code 2 for invalid JSON."""
        form = tmp_path / "form.json"
        form.write_text("{not json")

        assert cli.main(["--env-file", env_file, "--form", str(form)]) == cli.EXIT_INPUT_ERROR

    def test_unsupported_attachment_is_input_error(self, env_file, tmp_path):
        """Test exit code 2 for a rejected attachment type."""
        notes = tmp_path / "notes.txt"
        notes.write_text("hello")

        code = cli.main(["--env-file", env_file, "--attach", f"lab={notes}", "--dry-run"])

        assert code == cli.EXIT_INPUT_ERROR

    def test_letter_written_to_output(self, env_file, tmp_path, monkeypatch, make_client):
        """Test that the generated letter is written to --output."""
        original = DischargeLetterPipeline.from_environment

        def with_fake_client(env_file=None):
            pipeline = original(env_file=env_file)
            pipeline._client = make_client(response="Sehr geehrte Kollegen")
            return pipeline

        monkeypatch.setenv("GEMINI_API_KEY", "k")
        monkeypatch.setattr(DischargeLetterPipeline, "from_environment", with_fake_client)
        output = tmp_path / "letter.txt"

        code = cli.main(["--env-file", env_file, "--output", str(output)])

        assert code == cli.EXIT_OK
        assert output.read_text(encoding="utf-8") == "Sehr geehrte Kollegen"
