import argparse
import logging
import os
import sys
from pathlib import Path

# Ensure repo root is on sys.path when running from anywhere
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config.config_loader import apply_overrides, load_config  # noqa: E402
from gzt_recovery import GZTError, RunMode, run  # noqa: E402
from gzt_recovery import data_loader  # noqa: E402
from gzt_recovery.visualization import save_calibration_plots, save_recovery_plot  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="GZT respirometry: calibrate the apparatus and/or recover the instantaneous signal"
    )
    parser.add_argument("--mode", choices=[m.value for m in RunMode], default=RunMode.BOTH.value,
                        help="calibrate, recover, or both (calibration parameters feed recovery)")
    parser.add_argument("--calibration-data", help="Table with time, injected and measured columns")
    parser.add_argument("--raw-data", help="Table with time and raw measured columns")
    parser.add_argument("--params", help="Parameter file to read (recover) or write (calibrate)")
    parser.add_argument("--out", default=str(REPO_ROOT / "output"), help="Output directory")
    parser.add_argument("--config", help="Alternative YAML configuration file")
    parser.add_argument("--window-length", type=int, default=None,
                        help="Number of response parameters N (calibration only)")
    parser.add_argument("--threshold", type=float, default=None,
                        help="Noise-floor threshold for secondary smoothing")
    parser.add_argument("--no-plots", action="store_true", help="Skip saving diagnostic plots")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    mode = RunMode(args.mode)
    out_root = os.path.abspath(args.out)

    try:
        cfg = load_config(args.config)
        apply_overrides(cfg, {
            'calibration.window_length': args.window_length,
            'denoise.threshold': args.threshold,
        })
        io_cfg = cfg.get('io', {}) or {}
        plot_cfg = cfg.get('plots', {}) or {}
        make_plots = bool(plot_cfg.get('enabled', True)) and not args.no_plots
        dpi = int(plot_cfg.get('dpi', 150))
        params_path = args.params or os.path.join(out_root, io_cfg.get('parameters_file', 'Parameters_a.txt'))

        calibration = None
        raw = None
        parameters = None
        if mode in (RunMode.CALIBRATE, RunMode.BOTH):
            cal_path = args.calibration_data or io_cfg.get('calibration_file', 'CalibrationData.txt')
            calibration = data_loader.load_calibration_data(cal_path)
        if mode in (RunMode.RECOVER, RunMode.BOTH):
            raw_path = args.raw_data or io_cfg.get('raw_file', 'RawData.txt')
            raw = data_loader.load_raw_data(raw_path)
        if mode == RunMode.RECOVER:
            parameters = data_loader.load_parameters(params_path)

        result = run(mode, calibration=calibration, raw=raw, parameters=parameters, config=cfg)
    except (GZTError, FileNotFoundError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    outputs = {}
    cal = result['calibration']
    if cal is not None:
        outputs['parameters'] = data_loader.save_parameters(cal.parameters, params_path)
        if make_plots:
            outputs.update(save_calibration_plots(cal, calibration[0], out_root, dpi=dpi))
        print("\nCalibration summary")
        print("-------------------")
        for k in ["window_length", "rank", "condition", "rmse", "r2"]:
            if k in cal.diagnostics:
                print(f"{k}: {cal.diagnostics[k]}")

    recovered = result['recovered']
    if recovered is not None:
        rec_path = os.path.join(out_root, io_cfg.get('recovered_file', 'Recovered_Data.txt'))
        outputs['recovered'] = data_loader.save_recovered_signal(recovered, rec_path)
        if make_plots:
            threshold = (cfg.get('denoise', {}) or {}).get('threshold', None)
            outputs['recovery_plot'] = save_recovery_plot(raw, recovered, out_root, dpi=dpi,
                                                          threshold=threshold)
        print(f"\nRecovered {len(recovered)} samples")

    print("\nOutputs")
    print("-------")
    for name, path in outputs.items():
        print(f"{name}: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
