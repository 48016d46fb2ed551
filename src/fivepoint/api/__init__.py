from fivepoint.api.correspondence_io import load_correspondences, save_correspondences, save_solutions
from fivepoint.api.solver import FivePointResult, FivePointSolver, compute_essential_matrices, validate_correspondences

__all__ = [
    "FivePointResult",
    "FivePointSolver",
    "compute_essential_matrices",
    "validate_correspondences",
    "load_correspondences",
    "save_correspondences",
    "save_solutions",
]
