"""
Six-axis articulated robot arm simulation engine.

Tracks joint and Cartesian state of a simulated 6-DOF arm, converts
between joint space and Cartesian space, validates commanded motions
against physical limits, and serialises motion requests into a single
ordered execution stream with interpolated playback.  Rendering and
transport layers are expected to call into the engine and subscribe to
its events.

Modules:
    robots: Robot model tables, robot state containers, model registry.
    kinematics: Forward kinematics and closed-form / numerical inverse kinematics.
    safety: Workspace and joint-limit validation, AABB collision checks.
    motion: Motion requests, typed events, clocks, and the motion queue.
    config: Simulator configuration dataclasses and YAML loading.
    errors: Exception taxonomy shared by every module.
    utils: Shared constants, numeric helpers, and logging setup.
"""

__version__ = "0.1.0"
