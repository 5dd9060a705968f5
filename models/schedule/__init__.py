from .common import *  # noqa: F403
from .conflicts import *  # noqa: F403
from .metadata import *  # noqa: F403
from .show import *  # noqa: F403
from .show import Season, Show, Timeslot
from .metadata import OwnerKind

OWNER_MODELS = {
    OwnerKind.SHOW: Show,
    OwnerKind.SEASON: Season,
    OwnerKind.TIMESLOT: Timeslot,
}
