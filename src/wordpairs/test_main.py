import io

import pytest

from wordpairs.export import read_csv
from wordpairs.extractor import Entry
from wordpairs.main import PipelineConfig, parse_args, read_input_text, run_pipeline, translate_missing
from wordpairs.translation import NounTranslator, TranslationError


class DictClient:
    def __init__(self, answers):
        self.answers = answers
        self.calls = []

    def translate(self, text):
        self.calls.append(text)
        answer = self.answers.get(text)
        if answer is None:
            raise TranslationError("no answer")
        return answer


def test_parse_args_defaults():
    config = parse_args([])
    assert config.inputs == []
    assert config.output_format == "display"
    assert config.variant == "full"
    assert config.translate is None
    assert config.max_attempts == 2
    assert not config.should_translate


def test_csv_translates_unless_disabled():
    assert parse_args(["--format", "csv"]).should_translate
    assert not parse_args(["--format", "csv", "--no-translate"]).should_translate
    assert parse_args(["--translate"]).should_translate


def test_parse_args_rejects_zero_attempts():
    with pytest.raises(SystemExit):
        parse_args(["--max-attempts", "0"])


def test_read_input_text_joins_files(tmp_path):
    first = tmp_path / "a.txt"
    second = tmp_path / "b.txt"
    first.write_text("Der Hund", encoding="utf-8")
    second.write_text("die Katze", encoding="utf-8")
    assert read_input_text([str(first), str(second)]) == "Der Hund\ndie Katze"


def test_read_input_text_reads_stdin(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("das Haus"))
    assert read_input_text([]) == "das Haus"


def test_read_input_text_missing_file(tmp_path):
    with pytest.raises(SystemExit, match="Input file not found"):
        read_input_text([str(tmp_path / "missing.txt")])


def test_read_input_text_fixes_mojibake(tmp_path):
    path = tmp_path / "broken.txt"
    path.write_text("Ã¼nicode", encoding="utf-8")
    assert read_input_text([str(path)], fix_encoding=True) == "ünicode"
    assert read_input_text([str(path)]) == "Ã¼nicode"


def test_run_pipeline_display(tmp_path, capsys):
    path = tmp_path / "text.txt"
    path.write_text("Der Hund lief. Der Hund!", encoding="utf-8")
    entries = run_pipeline(PipelineConfig(inputs=[str(path)]))
    assert [entry.display for entry in entries] == ["der hund", "lief"]
    assert capsys.readouterr().out == "der hund, lief\n"


def test_run_pipeline_tsv_with_variant(tmp_path, capsys):
    path = tmp_path / "text.txt"
    path.write_text("ein Hund", encoding="utf-8")
    run_pipeline(PipelineConfig(inputs=[str(path)], output_format="tsv", variant="definite"))
    assert capsys.readouterr().out == "\tein\t\t\n\thund\t\t\n"


def test_run_pipeline_csv_translates_and_writes(tmp_path):
    source = tmp_path / "text.txt"
    source.write_text("Der Hund sah die Katze.", encoding="utf-8")
    output = tmp_path / "words.csv"
    client = DictClient({"hund": "dog", "katze": "cat"})
    translator = NounTranslator(client, sleep=lambda _: None)
    config = PipelineConfig(inputs=[str(source)], output=output, output_format="csv")
    entries = run_pipeline(config, translator=translator)
    assert [(entry.display, entry.english) for entry in entries] == [
        ("der hund", "dog"),
        ("sah", ""),
        ("die katze", "cat"),
    ]
    assert read_csv(output) == entries
    assert client.calls == ["hund", "sah", "sah", "katze"]


def test_run_pipeline_writes_text_output(tmp_path):
    source = tmp_path / "text.txt"
    source.write_text("kein Problem", encoding="utf-8")
    output = tmp_path / "nested" / "out.txt"
    run_pipeline(PipelineConfig(inputs=[str(source)], output=output))
    assert output.read_text(encoding="utf-8") == "kein problem\n"


def test_run_pipeline_empty_input_prints_nothing(tmp_path, capsys):
    source = tmp_path / "empty.txt"
    source.write_text("", encoding="utf-8")
    assert run_pipeline(PipelineConfig(inputs=[str(source)], translate=True)) == []
    assert capsys.readouterr().out == ""


def test_translate_missing_keeps_existing_translations():
    entries = [Entry(noun="hund", english="hound"), Entry(noun="katze", article="die")]
    client = DictClient({"katze": "cat"})
    translator = NounTranslator(client, sleep=lambda _: None)
    translated = translate_missing(entries, PipelineConfig(), translator)
    assert [entry.english for entry in translated] == ["hound", "cat"]
    assert client.calls == ["katze"]
    assert translate_missing([], PipelineConfig(), translator) == []
