# balancebot

Building blocks for the control software of a self-balancing robot. The
package is plain Python and uses only the standard library.

## Modules

- `balancebot.vectors`: `Xyz`, a float 3-vector with `+`, `-`, unary minus,
  scalar `*`, `magnitude_squared()`, `dot_product()` and `cross_product()`;
  `XyzInt16`, a raw sensor triple that raises `ValueError` if a component is
  outside the signed 16-bit range.
- `balancebot.quaternion`: `Quaternion` (defaults to the identity) with
  addition, subtraction, quaternion and scalar multiplication, `conjugate()`,
  `magnitude_squared()`, `to_wxyz()`,
  `Quaternion.from_euler_angles_radians(roll, pitch, yaw=None)` and
  `calculate_roll/pitch/yaw_radians()` and `..._degrees()`. `asin_clipped()`
  clips its argument to [-1, 1] before taking the arcsine.
- `balancebot.filters`: `FilterNull` (pass-through), `FilterMovingAverage`,
  `IIRFilter` (first-order low-pass; a fixed smoothing factor, or one derived
  from `dt` on each update), `FIRFilter` (the first coefficient weights the
  newest sample) and `ButterworthFilter` (second-order filter from its
  difference-equation coefficients).
- `balancebot.rolling_buffer`: `RollingBuffer`, a fixed-capacity sequence that
  drops its oldest item when full; index 0 is the oldest.
- `balancebot.pidf`: `PIDF` controller with `PIDFGains` (kp, ki, kd, kf).
  `update()` differentiates the measurement itself; `update_delta()` takes a
  supplied, possibly filtered, measurement change. Integration uses the
  trapezoid rule, only when the error exceeds `integral_threshold`, and is
  clamped to `integral_max` when that is positive. The integral is zeroed when
  the P term alone exceeds a non-zero `output_saturation_value`. `error()` and
  `error_raw()` return the P, I and D terms as a `PIDError`.
- `balancebot.i2c`: `I2C`, register reads and writes on a device, over an
  `I2CTransport` you implement (`write(address, data)` and
  `read(address, length)`). A short read from `read_bytes()` raises `OSError`.
- `balancebot.imu_base`: the `ImuBase` interface, `GyroAcc` readings,
  `AxisOrientation` and `map_axes()`, which turns sensor axes into vehicle
  axes. Bus access can be serialised with any context manager passed as
  `lock`.
- `balancebot.imu_bmi270`: `ImuBMI270`, configured for 16 g and 2000 deg/s at
  1.6 kHz; `init()` raises `RuntimeError` if the chip id is wrong. FIFO reading
  is not supported: `read_fifo_to_buffer()` returns 0.
- `balancebot.imu_mpu6886`: `ImuMPU6886`, configured for 8 g and 2000 deg/s at
  500 Hz, with temperature readout and FIFO draining into an internal buffer
  (`read_fifo_to_buffer()`, `read_fifo_item()`).
- `balancebot.espnow`: `EspNowTransceiver` over an `EspNowRadio` you
  implement. It keeps a broadcast, a primary and an optional secondary peer,
  binds the first non-broadcast sender as primary when no primary address was
  given, and copies received packets into `ReceivedData` buffers. Failures are
  raised as `EspNowError`.
- `balancebot.joystick`: `AtomJoyStickReceiver`, which decodes 25-byte
  joystick packets (checksum and address checked by default) into throttle,
  roll, pitch and yaw in Q4.12 fixed point, with bias and dead-zone handling,
  plus the arm and flip buttons, `Mode` and `AltMode`.
  `broadcast_my_mac_address_for_binding()` broadcasts the binding packet.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
from balancebot.pidf import PIDF, PIDFGains
from balancebot.filters import IIRFilter

pid = PIDF(PIDFGains(kp=1.0, ki=0.1, kd=0.05, kf=0.0))
pid.setpoint = 0.0

smoothing = IIRFilter(frequency_cutoff=10.0, dt=0.01)
measurement = smoothing.update(0.2)
output = pid.update(measurement, delta_t=0.01)
```

```python
from balancebot.quaternion import Quaternion

q = Quaternion.from_euler_angles_radians(0.1, 0.2, 0.3)
print(q.calculate_roll_degrees(), q.calculate_pitch_degrees(), q.calculate_yaw_degrees())
```

```python
from balancebot.rolling_buffer import RollingBuffer

buffer = RollingBuffer(3)
for value in range(5):
    buffer.append(value)
print(list(buffer))  # [2, 3, 4]
```

## What the package does not do

It contains no hardware access of its own. To talk to a real IMU you supply an
`I2CTransport` for your bus, and to receive joystick packets you supply an
`EspNowRadio` and forward its receive and send-complete events to
`EspNowTransceiver.on_data_received()` and `on_data_sent()`. There are no
motor drivers, no balancing control loop and no command-line program.