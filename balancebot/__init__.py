"""Vectors, quaternions, filters, PIDF control, IMU drivers and a joystick receiver for self-balancing robots."""

__version__ = "0.1.0"