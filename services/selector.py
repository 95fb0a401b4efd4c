# services/selector.py
import math
from typing import Sequence, Tuple

from services.errors import EmptyInputError
from services.hazard_index import HazardIndex
from services.models import CandidateRoute, ScoredRoute, Selection, TruckProfile, TuningParams
from services.scoring import score_route


def _rank(sr: ScoredRoute) -> Tuple[int, float, int]:
    # zero-score routes sort first on their own; missing duration sorts last
    dur = sr.route.duration_s
    return (sr.score, dur if dur is not None else math.inf, sr.index)

def select_route(routes: Sequence[CandidateRoute], truck: TruckProfile, tuning: TuningParams,
                 index: HazardIndex) -> Selection:
    """
    Score every candidate and pick the safest one.

    Order: lowest score, then shortest provider duration, then input position.
    `all` keeps the input order for client-side inspection.
    """
    if not routes:
        raise EmptyInputError("No candidate routes to select from.")
    scored = tuple(score_route(r, truck, tuning, index, position=i) for i, r in enumerate(routes))
    return Selection(chosen=min(scored, key=_rank), all=scored)
