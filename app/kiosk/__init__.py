"""키오스크 디스플레이 클라이언트 — 화면 디바이스 측 페어링 프로토콜.

Kiosk display client: the device side of the pairing protocol.
"""
