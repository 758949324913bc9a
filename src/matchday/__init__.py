"""matchday core package.

Resolves sports video filenames (and their folder names) to TheSportsDB
events:

- **leagues**: folder/series name -> league id, over a fixed priority chain
- **normalizer**: filename -> search title, date and card/segment tag
- **abbreviations**: team code expansion for ``A vs B`` titles
- **matcher**: tiered event selection against TheSportsDB
- **metadata**: display metadata built from a matched event or league
- **pipeline**: ``EventResolver``, which composes all of the above

The main entry point is the ``EventResolver`` class.
"""

from .cancellation import CancellationToken, OperationCancelled
from .models import MatchPath, MatchStatus, ResolutionQuery, ResolutionResult
from .pipeline import EventResolver
from .version import __version__

__all__ = [
    "__version__",
    "CancellationToken",
    "EventResolver",
    "MatchPath",
    "MatchStatus",
    "OperationCancelled",
    "ResolutionQuery",
    "ResolutionResult",
]
