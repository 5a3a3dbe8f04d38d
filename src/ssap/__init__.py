"""
SSAP serial bridge

Connects to an Arduino running the SSAP firmware and exposes its pins to Scratch.

- Link: the serial port and the line control flags asserted when it is opened.
- Conduit: a bi-directional byte channel. SerialConduit wraps a pyserial port, SimulatedConduit
  connects to an in-process SimulatedDevice.
- DeviceSession: opens a conduit, validates the firmware with the `WHO ARE YOU?` handshake, then
  reads lines on a background thread. Output and motor commands are written through the session.
- Poller: repeatedly requests the values of the inputs of interest and stores the readings in a
  ValueStore.
- discovery: tries every serial port at once and keeps the first device that passes the handshake.
- bridge: the HTTP interface used by Scratch 2 offline extensions.
"""
