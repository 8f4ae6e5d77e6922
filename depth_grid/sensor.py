#!/usr/bin/env python3
"""
Kinect depth sensor handling through libfreenect
"""

from threading import Event

from depth_grid import config


class SensorError(RuntimeError):
    """Raised when the depth sensor cannot be used"""


class KinectSensor:
    """Handler for a Kinect depth sensor"""

    def __init__(self, logger, device_index=0, tilt=config.DEFAULT_TILT, backend=None):
        self.logger = logger
        self.device_index = device_index
        self.tilt = tilt
        self.freenect = backend
        self.context = None
        self.device = None
        self.is_initialized = False
        self.is_streaming = False
        self.led_out_of_range = False

    def initialize(self):
        """Open the sensor, set tilt and LED and select 11-bit depth"""
        try:
            if self.freenect is None:
                import freenect
                self.freenect = freenect
            freenect = self.freenect

            self.context = freenect.init()
            if self.context is None:
                raise SensorError("libfreenect init failed")

            count = freenect.num_devices(self.context)
            self.logger.info(f"Found {count} Kinect devices")
            if count <= self.device_index:
                raise SensorError(f"No Kinect device #{self.device_index} present")

            self.device = freenect.open_device(self.context, self.device_index)
            if self.device is None:
                raise SensorError(f"Error opening Kinect #{self.device_index}")

            freenect.set_tilt_degs(self.device, self.tilt)
            freenect.set_led(self.device, freenect.LED_GREEN)
            freenect.set_depth_mode(self.device, freenect.RESOLUTION_MEDIUM, freenect.DEPTH_11BIT)

            self.is_initialized = True
            self.logger.info(f"Kinect #{self.device_index} initialized, tilt {self.tilt} degrees")
            return True
        except (ImportError, SensorError) as e:
            self.logger.error(f"Failed to initialize Kinect: {e}")
            self.is_initialized = False
            return False

    def set_indicator(self, out_of_range: bool):
        """Blink the LED red/yellow while the view is mostly out of range"""
        if out_of_range == self.led_out_of_range:
            return
        led = self.freenect.LED_BLINK_RED_YELLOW if out_of_range else self.freenect.LED_GREEN
        self.freenect.set_led(self.device, led)
        self.led_out_of_range = out_of_range

    def run(self, on_frame, out_of_range: Event, shutdown_event: Event):
        """
        Deliver depth frames to on_frame until shutdown

        Args:
            on_frame: Called as on_frame(depth, timestamp) for every frame
            out_of_range: Flag polled to drive the LED
            shutdown_event: Set to stop the loop
        """
        if not self.is_initialized:
            raise SensorError("Kinect not initialized")

        freenect = self.freenect

        def depth_callback(dev, depth, timestamp):
            on_frame(depth, timestamp)

        freenect.set_depth_callback(self.device, depth_callback)
        freenect.start_depth(self.device)
        self.is_streaming = True
        self.logger.info("Depth stream started")

        while not shutdown_event.is_set():
            if freenect.process_events(self.context) < 0:
                self.logger.error("libfreenect event processing failed")
                break
            self.set_indicator(out_of_range.is_set())

        self.logger.info("Depth stream loop finished")

    def cleanup(self):
        """Stop streaming, switch off the LED and close the device"""
        if self.freenect is None:
            return
        try:
            if self.device is not None:
                if self.is_streaming:
                    self.logger.info("Stopping depth stream...")
                    self.freenect.stop_depth(self.device)
                    self.is_streaming = False
                self.freenect.set_led(self.device, self.freenect.LED_OFF)
                self.freenect.close_device(self.device)
                self.device = None
            if self.context is not None:
                self.freenect.shutdown(self.context)
                self.context = None
        except Exception as e:
            self.logger.error(f"Error during Kinect cleanup: {e}")
