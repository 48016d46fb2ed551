from fivepoint.api import FivePointResult, FivePointSolver, compute_essential_matrices
from fivepoint.config import SolverConfig
from fivepoint.errors import DegenerateConfigurationError, FivePointError, InputCountError, NumericOverflowError

__all__ = [
    "FivePointResult",
    "FivePointSolver",
    "compute_essential_matrices",
    "SolverConfig",
    "FivePointError",
    "InputCountError",
    "DegenerateConfigurationError",
    "NumericOverflowError",
]
