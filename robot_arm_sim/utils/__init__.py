"""
Shared utilities for the robot_arm_sim package.

Provides default arm tables, stateless numeric helpers, and logging setup.
"""
