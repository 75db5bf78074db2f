from .pose import NullPoseProvider, PoseProvider, StaticPoseProvider

__all__ = ["NullPoseProvider", "PoseProvider", "StaticPoseProvider"]
