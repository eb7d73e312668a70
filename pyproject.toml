[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "balancebot"
version = "0.1.0"
description = "Control building blocks for self-balancing robots: vectors, quaternions, filters, PIDF control, IMU drivers and a joystick receiver."
requires-python = ">=3.10"
dependencies = []
keywords = ["robotics", "pid", "imu", "filters", "quaternion", "joystick", "esp-now"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["balancebot"]

[tool.pytest.ini_options]
addopts = "-ra"
