"""
Kinematics for the simulated 6-DOF arm.

Forward kinematics composes per-joint Denavit-Hartenberg transforms.
Inverse kinematics offers a closed-form geometric solver with a
Newton-Raphson fallback on position error.
"""
