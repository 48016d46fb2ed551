"""
Numerical building blocks of the five-point essential-matrix solver.

Pipeline: null space of the epipolar system -> ten cubic constraints ->
Gauss-Jordan elimination on a fixed 20-monomial template -> action matrix ->
real eigenvectors back-substituted through the null-space basis.
"""
