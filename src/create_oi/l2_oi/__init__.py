"""
create_oi.l2_oi
Open Interface protocol layer: command/sensor tables, TX encoders and writer,
RX packet reader.
"""
