import importlib.util
import os
import tempfile
from pathlib import Path

import numpy as np

from gzt_recovery import data_loader

CLI_PATH = Path(__file__).resolve().parents[1] / 'scripts' / 'gzt_cli.py'


def _load_cli():
    spec = importlib.util.spec_from_file_location('gzt_cli', CLI_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def _chamber(u, alpha=0.3):
    y = np.zeros(u.size)
    for i in range(1, u.size):
        y[i] = (1.0 - alpha) * y[i - 1] + alpha * u[i - 1]
    return y


def _write_inputs(tmp):
    k = np.arange(600)
    u = np.where((k % 40) < 13, 2.0, 0.0)
    cal_path = os.path.join(tmp, 'CalibrationData.txt')
    np.savetxt(cal_path, np.column_stack([k * 0.5, u, _chamber(u)]))

    k2 = np.arange(300)
    u2 = np.where((k2 % 50) < 18, 3.0, 0.0)
    raw_path = os.path.join(tmp, 'RawData.txt')
    np.savetxt(raw_path, np.column_stack([k2 * 0.5, _chamber(u2)]))
    return cal_path, raw_path


def test_cli_calibrate_then_recover_writes_artifacts():
    cli = _load_cli()
    with tempfile.TemporaryDirectory() as tmp:
        cal_path, raw_path = _write_inputs(tmp)
        out = os.path.join(tmp, 'out')
        rc = cli.main([
            '--mode', 'both',
            '--calibration-data', cal_path,
            '--raw-data', raw_path,
            '--out', out,
            '--window-length', '8',
        ])
        assert rc == 0
        params = data_loader.load_parameters(os.path.join(out, 'Parameters_a.txt'))
        assert params.window_length == 8
        table = np.loadtxt(os.path.join(out, 'Recovered_Data.txt'))
        assert table.shape == (300 - 8 + 1, 2)
        for name in ('parameters.png', 'calibration_fit.png', 'recovery.png'):
            assert os.path.exists(os.path.join(out, 'plots', name)), f"missing plot {name}"

        # Recover-only reuses the stored parameter file
        rc = cli.main([
            '--mode', 'recover',
            '--raw-data', raw_path,
            '--params', os.path.join(out, 'Parameters_a.txt'),
            '--out', os.path.join(tmp, 'out2'),
            '--no-plots',
        ])
        assert rc == 0
        assert os.path.exists(os.path.join(tmp, 'out2', 'Recovered_Data.txt'))


def test_cli_reports_invalid_window(capsys):
    cli = _load_cli()
    with tempfile.TemporaryDirectory() as tmp:
        cal_path, _ = _write_inputs(tmp)
        rc = cli.main([
            '--mode', 'calibrate',
            '--calibration-data', cal_path,
            '--out', os.path.join(tmp, 'out'),
            '--window-length', '5000',
            '--no-plots',
        ])
        assert rc == 1
        assert 'window_length=5000' in capsys.readouterr().err


def test_cli_reports_missing_config(capsys):
    cli = _load_cli()
    with tempfile.TemporaryDirectory() as tmp:
        cal_path, _ = _write_inputs(tmp)
        rc = cli.main([
            '--mode', 'calibrate',
            '--calibration-data', cal_path,
            '--config', os.path.join(tmp, 'missing.yaml'),
            '--out', os.path.join(tmp, 'out'),
        ])
        assert rc == 1
        assert 'Configuration file not found' in capsys.readouterr().err


def test_cli_reports_bad_denoise_mode(capsys):
    cli = _load_cli()
    with tempfile.TemporaryDirectory() as tmp:
        cal_path, raw_path = _write_inputs(tmp)
        cfg_path = os.path.join(tmp, 'bad.yaml')
        with open(cfg_path, 'w') as f:
            f.write("calibration:\n  window_length: 8\ndenoise:\n  mode: gaussian\n")
        rc = cli.main([
            '--mode', 'both',
            '--calibration-data', cal_path,
            '--raw-data', raw_path,
            '--config', cfg_path,
            '--out', os.path.join(tmp, 'out'),
            '--no-plots',
        ])
        assert rc == 1
        assert 'Unknown denoise mode' in capsys.readouterr().err
