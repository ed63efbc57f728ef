import logging

import pytest

from conftest import write_fda_file, write_of_file
from emucheck.config import LoaderSettings
from emucheck.errors import (
    CountMismatchError,
    DirectoryNotFoundError,
    EmptyResultError,
    FormatError,
    TableMismatchError,
)
from emucheck.io import loader as loader_module
from emucheck.io.loader import CalibrationLoader, load_data
from emucheck.io.output_factor import OutputFactorTable


def test_load_sample_directory(calibration_dir):
    data = load_data(calibration_dir)
    assert [cd.key for cd in data] == [("Synergy1", "A10"), ("Synergy1", "A14")]
    assert all(cd.validate() for cd in data)
    assert data[0].get_correction_factor(12.0, 99.2, 10) == pytest.approx(0.9206 * 2.5)
    assert data[1].fda.ids == [4, 5]


def test_load_logs_summary(calibration_dir, caplog):
    with caplog.at_level(logging.INFO, logger="emucheck.io.loader"):
        load_data(calibration_dir)
    assert "Loaded 2 correction data table(s)" in caplog.text


def test_discover_sorted_and_filtered(calibration_dir):
    (calibration_dir / "notes.txt").write_text("not a calibration file\n")
    (calibration_dir / "of_archive").mkdir()
    of_files, fda_files = CalibrationLoader().discover(calibration_dir)
    assert [p.name for p in of_files] == ["of_synergy1_a10.csv", "of_synergy1_a14.csv"]
    assert [p.name for p in fda_files] == ["fda_synergy1_a10.csv", "fda_synergy1_a14.csv"]


def test_missing_directory(tmp_path):
    with pytest.raises(DirectoryNotFoundError) as exc_info:
        load_data(tmp_path / "nope")
    assert isinstance(exc_info.value, FileNotFoundError)


def test_file_is_not_a_directory(tmp_path):
    path = write_of_file(tmp_path / "of_a.csv", "Synergy1", "A10")
    with pytest.raises(DirectoryNotFoundError):
        load_data(path)


def test_count_mismatch_is_raised_before_parsing(calibration_dir, monkeypatch):
    (calibration_dir / "fda_synergy1_a14.csv").unlink()

    def fail(path):
        raise AssertionError("files must not be parsed")

    monkeypatch.setattr(OutputFactorTable, "from_csv", staticmethod(fail))
    with pytest.raises(CountMismatchError) as exc_info:
        load_data(calibration_dir)
    assert (exc_info.value.n_output_factor, exc_info.value.n_aperture) == (2, 1)


def test_empty_directory(tmp_path):
    with pytest.raises(EmptyResultError, match="No configuration data was loaded"):
        load_data(tmp_path)


def test_only_unrelated_files(tmp_path):
    (tmp_path / "readme.md").write_text("# calibration\n")
    with pytest.raises(EmptyResultError):
        load_data(tmp_path)


def test_energy_mismatch(tmp_path):
    write_of_file(tmp_path / "of_a10.csv", "Synergy1", "A10")
    write_fda_file(tmp_path / "fda_a10.csv", "Synergy1", "A10",
                   energies=[4.0, 6.0, 8.0, 10.0, 15.0])
    with pytest.raises(TableMismatchError, match="mismatch between the energies") as exc_info:
        load_data(tmp_path)
    assert (exc_info.value.machine, exc_info.value.applicator) == ("Synergy1", "A10")


def test_energy_count_mismatch(tmp_path):
    write_of_file(tmp_path / "of_a10.csv", "Synergy1", "A10")
    write_fda_file(tmp_path / "fda_a10.csv", "Synergy1", "A10",
                   energies=[4.0, 6.0, 8.0, 10.0],
                   rows=[("6x6", 1, [0.9, 0.8, 0.7, 0.6])])
    with pytest.raises(TableMismatchError):
        load_data(tmp_path)


def test_reordered_energy_columns_are_accepted(tmp_path):
    write_of_file(tmp_path / "of_a10.csv", "Synergy1", "A10")
    write_fda_file(tmp_path / "fda_a10.csv", "Synergy1", "A10",
                   energies=[12.0, 10.0, 8.0, 6.0, 4.0],
                   rows=[("6x6", 1, [0.5, 0.6, 0.7, 0.8, 0.9])])
    (cd,) = load_data(tmp_path)
    assert cd.fda.get_correction_factor(6.0, 1) == 0.8


def test_missing_aperture_table_for_applicator(tmp_path):
    write_of_file(tmp_path / "of_a10.csv", "Synergy1", "A10")
    write_fda_file(tmp_path / "fda_a14.csv", "Synergy1", "A14")
    with pytest.raises(TableMismatchError, match="no field defining aperture table found"):
        load_data(tmp_path)


def test_machine_names_are_case_sensitive(tmp_path):
    write_of_file(tmp_path / "of_a10.csv", "Synergy1", "A10")
    write_fda_file(tmp_path / "fda_a10.csv", "synergy1", "A10")
    with pytest.raises(TableMismatchError):
        load_data(tmp_path)


def test_duplicate_output_factor_tables(tmp_path):
    write_of_file(tmp_path / "of_a10.csv", "Synergy1", "A10")
    write_of_file(tmp_path / "of_a10_copy.csv", "Synergy1", "A10")
    write_fda_file(tmp_path / "fda_a10.csv", "Synergy1", "A10")
    write_fda_file(tmp_path / "fda_a14.csv", "Synergy1", "A14")
    with pytest.raises(TableMismatchError, match="duplicate output factor tables"):
        load_data(tmp_path)


def test_malformed_file_aborts_load(calibration_dir):
    path = calibration_dir / "fda_synergy1_a14.csv"
    path.write_text(path.read_text().replace("Applicator", "Applikator"))
    with pytest.raises(FormatError, match="expected label 'Applicator'") as exc_info:
        load_data(calibration_dir)
    assert exc_info.value.path == str(path)


def test_undecodable_file_aborts_load(tmp_path):
    write_of_file(tmp_path / "of_a10.csv", "Synergy1", "A10")
    path = write_fda_file(tmp_path / "fda_a10.csv", "Synergy1", "A10")
    path.write_bytes(path.read_bytes().replace(b"6x6", b"6\xff6"))
    with pytest.raises(FormatError, match="not valid UTF-8") as exc_info:
        load_data(tmp_path)
    assert exc_info.value.path == str(path)
    assert isinstance(exc_info.value.__cause__, UnicodeDecodeError)


def test_custom_prefixes(tmp_path):
    write_of_file(tmp_path / "output_a10.csv", "Synergy1", "A10")
    write_fda_file(tmp_path / "aperture_a10.csv", "Synergy1", "A10")
    settings = LoaderSettings(of_prefix="output_", fda_prefix="aperture_")
    assert [cd.key for cd in load_data(tmp_path, settings)] == [("Synergy1", "A10")]


def test_single_worker_with_progress(calibration_dir):
    settings = LoaderSettings(max_workers=1, show_progress=True)
    data = CalibrationLoader(settings).load(calibration_dir)
    assert len(data) == 2


def test_parse_all_keeps_job_order(tmp_path):
    jobs = [(lambda p, i=i: i, tmp_path / f"f{i}") for i in range(6)]
    assert CalibrationLoader().parse_all(jobs) == list(range(6))


def test_parse_all_raises_first_failure(tmp_path):
    def ok(path):
        return path.name

    def broken(path):
        raise FormatError("broken", path=path)

    jobs = [(ok, tmp_path / "a"), (broken, tmp_path / "b"), (ok, tmp_path / "c")]
    with pytest.raises(FormatError, match="broken"):
        CalibrationLoader(LoaderSettings(max_workers=2)).parse_all(jobs)


def test_parse_all_closes_progress_bar_on_failure(tmp_path, monkeypatch):
    closed = []

    class RecordingBar(loader_module.tqdm):
        def close(self):
            closed.append(True)
            super().close()

    monkeypatch.setattr(loader_module, "tqdm", RecordingBar)

    def broken(path):
        raise FormatError("broken", path=path)

    settings = LoaderSettings(max_workers=1, show_progress=True)
    with pytest.raises(FormatError):
        CalibrationLoader(settings).parse_all([(broken, tmp_path / "a")])
    assert closed


def test_parse_all_empty():
    assert CalibrationLoader().parse_all([]) == []
