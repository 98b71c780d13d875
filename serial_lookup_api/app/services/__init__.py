"""
Service layer.

Each module wraps one collaborator of the lookup pipeline (data
source, geolocation, identifier decoding, access log) behind a small
class so the endpoint can be exercised with fakes.
"""
