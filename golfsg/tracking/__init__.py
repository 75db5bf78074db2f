from .smoothing import LocationSmoother, smoothed_location

__all__ = ["LocationSmoother", "smoothed_location"]
