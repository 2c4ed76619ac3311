# main.py
"""
Main entry point for the particle simulation.

This script orchestrates the entire simulation lifecycle:
1. Loads configuration from `config.json` and applies the selected preset.
2. Initializes the logging system.
3. Opens the window and sets up the particles.
4. Runs the main frame loop (input -> spawn -> step -> cull -> draw).
5. Handles clean shutdown.
"""
import logging
from utils import setup_logging, load_config, apply_preset
from constants import DEFAULT_LOG_THROTTLE_STEPS
import cProfile
import pstats
import io

def main():
    """
    The main function to run the simulation.
    """
    # Logging is not set up yet, so we use a print for this one error.
    try:
        base_config = load_config('config.json')
        config = apply_preset(base_config, base_config.get('run_control', {}).get('preset'))
    except Exception as e:
        print(f"FATAL: Could not load config.json. Error: {e}")
        return

    setup_logging(config)

    logging.info("--- Particle Simulation Starting ---")

    sim_params = config.get('simulation_parameters', {})
    run_params = config.get('run_control', {})
    vis_params = config.get('visualization', {})

    from particle import ParticleSystem
    from simulation import Simulation
    from visualization import Visualizer

    # --- Component Initialization ---
    # 1. The visualizer owns the window, so it decides the world bounds.
    visualizer = Visualizer(vis_params)

    # 2. Scatter the initial batch over the visible world.
    particles = ParticleSystem(sim_params, visualizer.bounds)
    sim = Simulation(particles, sim_params)

    profiler = cProfile.Profile() if run_params.get('profile', True) else None

    log_throttle = run_params.get('log_throttle_steps', DEFAULT_LOG_THROTTLE_STEPS)
    max_steps = run_params.get('max_steps', 0) # 0 runs until the window is closed

    if profiler:
        profiler.enable()
    while True:
        frame = visualizer.poll()
        if frame is None:
            break

        sim.step(frame)
        visualizer.draw(particles)

        # Hot loops must throttle logs
        if sim.frame_count % log_throttle == 0:
            logging.info(
                f"Frame {sim.frame_count} | Particles: {len(particles)} | "
                f"FPS: {visualizer.clock.get_fps():.1f}"
            )
            logging.debug(
                f"Frame {sim.frame_count} | Spawned total: {sim.total_spawned} | "
                f"Culled total: {sim.total_culled}"
            )

        if max_steps and sim.frame_count >= max_steps:
            logging.info(f"Reached max_steps ({max_steps}). Stopping simulation.")
            break
    if profiler:
        profiler.disable()

    visualizer.close()
    logging.info("Simulation loop finished.")

    if profiler:
        logging.info("--- Performance Profile ---")
        s = io.StringIO()
        # Sort by cumulative time spent in the function
        stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
        stats.print_stats(20)
        logging.info(f"\n{s.getvalue()}")

    logging.info("--- Particle Simulation Shutting Down ---")


if __name__ == "__main__":
    main()
