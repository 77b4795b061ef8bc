# -*- coding:utf-8 -*-
"""
RoboMaster EP executor (real robot)
- Chassis moves: advance one tile, short reverse, 90/180 degree turns
- Floor colour from a reflectance sensor on the sensor adaptor (ADC -> colour code)
- Yaw from the chassis attitude subscription, front distance from the ToF sensor

What the robot needs:
- Reflectance sensor on sensor adaptor id 1, port 1, pointing at the floor
- Optional distance sensor facing forward
"""

import logging
import threading

import numpy as np

from . import executor as ex
from .config import ADC_COLOR_BANDS

logger = logging.getLogger(__name__)

# ================== CONFIG (adjust to the real robot) ==================
V_LINEAR_MPS = 0.20        # m/s for tile moves
TURN_SPEED_DPS = 90.0      # deg/s for in-place turns
MAX_MOVE_TIME_S = 8.0      # one move never takes longer than this
ADC_SAMPLES = 5            # reads per floor sample, median is used
ADAPTOR_ID, ADAPTOR_PORT = 1, 1


def adc_to_color(value, bands=ADC_COLOR_BANDS):
    """Map an ADC reading onto a colour code using (upper bound, code) bands."""
    if value is None:
        return None
    for upper, code in bands:
        if value < upper:
            return code
    return None


class RoboMasterExecutor(ex.MoveExecutor):
    """
    Wraps the SDK so drivers get blocking, result-returning moves.
    Pass an initialised `robot.Robot` (or use connect()).
    """

    def __init__(self, ep_robot, adc_bands=ADC_COLOR_BANDS, use_distance=True,
                 v_linear_mps=V_LINEAR_MPS, turn_speed_dps=TURN_SPEED_DPS,
                 max_move_time_s=MAX_MOVE_TIME_S):
        self.ep_robot = ep_robot
        self.ep_chassis = ep_robot.chassis
        self.ep_sensor = getattr(ep_robot, "sensor", None)
        self.ep_adaptor = getattr(ep_robot, "sensor_adaptor", None)
        self.adc_bands = tuple(adc_bands)
        self.v_linear_mps = v_linear_mps
        self.turn_speed_dps = turn_speed_dps
        self.max_move_time_s = max_move_time_s

        self._lock = threading.Lock()
        self._yaw_deg = None
        self._yaw_zero = None
        self._front_mm = None

        # ----- Subscriptions (SDK threads write, drivers read) -----
        def _att_cb(attitude_info):
            yaw = float(attitude_info[0])
            with self._lock:
                if self._yaw_zero is None:
                    self._yaw_zero = yaw
                self._yaw_deg = yaw

        def _dist_cb(sub_info):
            mm = sub_info[0] if isinstance(sub_info, (list, tuple)) else sub_info
            if mm is not None and int(mm) > 0:
                with self._lock:
                    self._front_mm = float(mm)

        self.ep_chassis.sub_attitude(freq=10, callback=_att_cb)
        self._dist_subscribed = False
        if use_distance and self.ep_sensor is not None:
            self.ep_sensor.sub_distance(freq=10, callback=_dist_cb)
            self._dist_subscribed = True

    @classmethod
    def connect(cls, conn_type="ap", **kwargs):
        from robomaster import robot

        ep_robot = robot.Robot()
        ep_robot.initialize(conn_type=conn_type)
        logger.info("Connected to RoboMaster over %s", conn_type)
        return cls(ep_robot, **kwargs)

    # ---------- Movement ----------
    def execute_move(self, kind, magnitude):
        if kind in (ex.ADVANCE_ONE_CELL, ex.REVERSE_SHORT):
            action = self.ep_chassis.move(x=magnitude, y=0, z=0, xy_speed=self.v_linear_mps)
        elif kind in (ex.TURN_LEFT_90, ex.TURN_RIGHT_90, ex.TURN_AROUND_180):
            # chassis z is counter-clockwise positive
            action = self.ep_chassis.move(x=0, y=0, z=-magnitude, z_speed=self.turn_speed_dps)
        else:
            raise ValueError(f"unknown move kind {kind!r}")
        logger.debug("Action: %s %.3f", kind, magnitude)
        if action.wait_for_completed(timeout=self.max_move_time_s):
            return ex.MoveResult(ex.OK)
        self.stop()
        return ex.MoveResult(ex.TIMEOUT, f"not completed within {self.max_move_time_s:.1f}s")

    def stop(self):
        self.ep_chassis.drive_speed(x=0, y=0, z=0)

    # ---------- Sensors ----------
    def read_cell_sensor(self):
        if self.ep_adaptor is None:
            return None
        reads = []
        for _ in range(ADC_SAMPLES):
            value = self.ep_adaptor.get_adc(id=ADAPTOR_ID, port=ADAPTOR_PORT)
            if value is not None:
                reads.append(value)
        if not reads:
            return None
        return adc_to_color(float(np.median(reads)), self.adc_bands)

    def read_heading_correction(self):
        with self._lock:
            if self._yaw_deg is None:
                return None
            # attitude yaw shares the chassis sign, flip it to clockwise positive
            return -(((self._yaw_deg - self._yaw_zero + 180) % 360) - 180)

    def read_front_distance(self):
        with self._lock:
            return self._front_mm

    # ---------- Cleanup ----------
    def close(self):
        self.ep_chassis.unsub_attitude()
        if self._dist_subscribed:
            self.ep_sensor.unsub_distance()
            self._dist_subscribed = False
        self.ep_robot.close()
        logger.info("RoboMaster connection closed")
