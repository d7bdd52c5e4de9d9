import argparse
from pathlib import Path
import numpy as np
import logging

from molsim.core.atoms import make_atoms
from molsim.core.errors import MolsimError
from molsim.core.simulation import Simulation
from molsim.io import open_trajectory, ResultWriter
from molsim.analysis.rmsd import rmsd_over_trajectory, rmsd_matrix
from molsim.visualization.rmsd_plotter import RMSDPlotter
from molsim.utils.config_manager import ConfigManager
from molsim.utils.helpers import parse_atom_indices

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='RMSD analysis of molecular dynamics trajectories.')
    parser.add_argument('--trajectory', type=str, help='Path to MD trajectory file (overrides config).')
    parser.add_argument('--config', type=str, help='Path to YAML configuration file.')
    parser.add_argument('--format', type=str, dest='file_format', help="Trajectory format: auto, lammps, npy or ovito.")
    parser.add_argument('--natoms', type=int, help='Expected number of atoms; checked against the trajectory.')
    parser.add_argument('--indices', type=str, help="Atoms to compare, e.g. 'all' or '0-9,12' (0-based).")
    parser.add_argument('--first', type=int, help='First frame of the selection (1-based).')
    parser.add_argument('--last', type=int, help='Last frame of the selection (inclusive).')
    parser.add_argument('--step', type=int, help='Frame stride of the selection.')
    parser.add_argument('--reference-frame', type=int, help='Raw index of the reference frame (default: first selected).')
    parser.add_argument('--mass-weighted', action='store_true', help='Use atom masses for the superposition centers.')
    parser.add_argument('--no-align', action='store_true', help='Compare coordinates without superposition.')
    parser.add_argument('--matrix', action='store_true', help='Also compute the pairwise RMSD matrix.')
    parser.add_argument('--output-dir', type=str, help='Directory for results.')
    parser.add_argument('--plot', action='store_true', help='Save plots of the results.')
    parser.add_argument('--progress', action='store_true', help='Show progress bars.')
    return parser


def _cli_overrides(args: argparse.Namespace) -> dict:
    """Configuration updates given on the command line."""
    traj_cfg, analysis_cfg, output_cfg = {}, {}, {}
    if args.trajectory is not None: traj_cfg['file'] = args.trajectory
    if args.file_format is not None: traj_cfg['format'] = args.file_format
    for key in ('first', 'last', 'step'):
        if getattr(args, key) is not None: traj_cfg[key] = getattr(args, key)
    if args.indices is not None: analysis_cfg['atom_indices'] = args.indices
    if args.reference_frame is not None: analysis_cfg['reference_frame'] = args.reference_frame
    if args.mass_weighted: analysis_cfg['mass_weighted'] = True
    if args.no_align: analysis_cfg['align'] = False
    if args.matrix: analysis_cfg['matrix'] = True
    if args.output_dir is not None: output_cfg['directory'] = args.output_dir
    if args.plot: output_cfg['plot'] = True
    return {'trajectory': traj_cfg, 'analysis': analysis_cfg, 'output': output_cfg}


def run(config: ConfigManager, natoms=None, progress: bool = False) -> dict:
    """
    Run the RMSD analysis described by ``config`` and write its results.

    Returns:
        Summary of the analysis, as saved to analysis_results.json
    """
    traj_cfg = config.get_trajectory_config()
    analysis_cfg = config.get_analysis_config()
    output_cfg = config.get_output_config()
    if not traj_cfg.get('file'):
        raise ValueError("No trajectory file given (use --trajectory or trajectory.file in the config).")

    logger.info(f"Loading trajectory: {traj_cfg['file']}")
    backend = open_trajectory(traj_cfg['file'], traj_cfg.get('format', 'auto'))
    if natoms is not None and natoms != backend.n_atoms:
        backend.close()
        raise ValueError(f"Expected {natoms} atoms, trajectory has {backend.n_atoms}.")

    writer = ResultWriter(output_cfg['directory'])
    with Simulation(make_atoms(backend.n_atoms), backend,
                    first=traj_cfg['first'], last=traj_cfg['last'], step=traj_cfg['step']) as sim:
        logger.info(f"Simulation loaded:\n{sim!r}")
        indices = parse_atom_indices(analysis_cfg['atom_indices'], backend.n_atoms)
        weights = sim.masses(indices) if analysis_cfg['mass_weighted'] else None
        align = bool(analysis_cfg['align'])

        values = rmsd_over_trajectory(sim, indices, weights=weights,
                                      reference_frame=analysis_cfg['reference_frame'],
                                      align=align, progress=progress)
        frames = list(sim.frame_range)
        series_path = writer.save_rmsd_series(frames, values)
        results = {
            'trajectory': sim.path_trajectory,
            'n_atoms_selected': int(len(indices)),
            'n_frames': len(frames),
            'reference_frame': analysis_cfg['reference_frame'] or sim.frame_range.start,
            'aligned': align,
            'rmsd_mean': float(np.mean(values)),
            'rmsd_max': float(np.max(values)),
            'rmsd_file': str(series_path),
        }

        matrix = None
        if analysis_cfg['matrix']:
            matrix = rmsd_matrix(sim, indices, weights=weights, align=align, progress=progress)
            results['matrix_file'] = str(writer.save_rmsd_matrix(matrix))

    if output_cfg.get('plot'):
        RMSDPlotter((frames, values), 'series', writer.output_dir / 'rmsd.png').generate_plot()
        if matrix is not None:
            RMSDPlotter(matrix, 'matrix', writer.output_dir / 'rmsd_matrix.png').generate_plot()

    writer.save_config(config.to_dict())
    writer.save_analysis_results(results)
    return results


def main(argv=None):
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )
    args = build_parser().parse_args(argv)

    try:
        config = ConfigManager(args.config)
        config.update_config(_cli_overrides(args))
        results = run(config, natoms=args.natoms, progress=args.progress)
        logger.info(f"Mean RMSD over {results['n_frames']} frames: {results['rmsd_mean']:.6f}")
        logger.info(f"Results written to {Path(config.get_output_config()['directory']).resolve()}")
    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        raise SystemExit(1)
    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        raise SystemExit(1)
    except MolsimError as e:
        logger.error(f"Trajectory error: {e}")
        raise SystemExit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        raise SystemExit(1)


if __name__ == '__main__':
    main()
