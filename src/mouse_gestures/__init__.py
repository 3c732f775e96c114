"""MouseGestures - directional pointer gesture recognition for browser commands."""

__version__ = "0.4.0"

from mouse_gestures.sampler import PointerSample, Trajectory, TrajectorySampler
from mouse_gestures.directions import Direction, DirectionClassifier, classify
from mouse_gestures.patterns import GesturePattern, PatternAccumulator, accumulate, normalize
from mouse_gestures.policy import Behavior, ListMode, SiteSettings, evaluate_policy, site_access
from mouse_gestures.resolver import ActionName, ActionRequest, ActionResolver, LinkOverride
from mouse_gestures.config import EngineConfig, RecognitionConfig, ConfigStore, load_config
from mouse_gestures.trail import TrailFrame, TrailScheduler
from mouse_gestures.engine import GestureEngine, PointerEvent, PointerTarget, SessionState, recognize
from mouse_gestures.dispatch import ActionDispatcher
from mouse_gestures.recorder import GestureRecorder, GesturePlayer
