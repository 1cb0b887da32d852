import os
import sys

import pytest

import churn

PYTHON_DIR = os.path.dirname(os.path.abspath(churn.__file__))


def commands():
    main_c = os.path.join(PYTHON_DIR, "main_c.py")
    main_e = os.path.join(PYTHON_DIR, "main_e.py")
    return (f'"{sys.executable}" "{main_c}" %s TEST.CMP',
            f'"{sys.executable}" "{main_e}" TEST.CMP TEST.OUT')


def test_churn_passes_on_sample_tree(tmp_path, monkeypatch):
    data_dir = tmp_path / "data"
    (data_dir / "nested").mkdir(parents=True)
    (data_dir / "a.txt").write_bytes(b"hello hello hello\n")
    (data_dir / "empty.bin").write_bytes(b"")
    (data_dir / "nested" / "all.bin").write_bytes(bytes(range(256)) * 2)
    (data_dir / "skip.zip").write_bytes(b"PK\x03\x04")
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    monkeypatch.chdir(work_dir)

    program = churn.ChurnProgram()
    compress_cmd, expand_cmd = commands()
    assert program.main([str(data_dir), compress_cmd, expand_cmd]) == 0
    assert program.total_files == 3
    assert program.total_passed == 3

    log = (work_dir / "CHURN.LOG").read_text(encoding="utf-8")
    assert log.count("Passed") == 3
    assert "skip.zip" not in log
    assert "Total failed:  0" in log


def test_churn_records_failures(tmp_path, monkeypatch):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "a.txt").write_bytes(b"abc")
    monkeypatch.chdir(tmp_path)

    program = churn.ChurnProgram()
    assert program.main([str(data_dir), f'"{sys.executable}" -c "import sys; sys.exit(3)"', "true"]) == 1
    assert "Failed" in (tmp_path / "CHURN.LOG").read_text(encoding="utf-8")


def test_files_are_equal(tmp_path):
    first = tmp_path / "one"
    second = tmp_path / "two"
    first.write_bytes(b"x" * 5000)
    second.write_bytes(b"x" * 4999 + b"y")
    program = churn.ChurnProgram()
    assert program.files_are_equal(str(first), str(first))
    assert not program.files_are_equal(str(first), str(second))
    assert not program.files_are_equal(str(first), str(tmp_path / "missing"))


def test_usage_exits():
    with pytest.raises(SystemExit):
        churn.ChurnProgram().main([])
