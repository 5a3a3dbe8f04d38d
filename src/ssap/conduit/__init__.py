"""
The conduit package provides an abstraction of the byte stream to a device.
Concrete implementations are a serial port and an in-process simulated SSAP device.
"""
