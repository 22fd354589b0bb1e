"""
create_oi.l1_drivers
Transport layer: serial port contract, pyserial adapter and link config.
"""
