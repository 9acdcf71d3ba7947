"""The heat_aposteriori package estimates discretization errors of heat-equation solutions.

This package offers:
  - A residual-type a posteriori error estimator for P1 solutions of the heat
    equation on triangular meshes, vectorized over all elements.
  - The finite-element primitives it relies on (gradients, neighbor topology,
    quadrature, coefficient fields).
  - Marking of elements for adaptive refinement.

Submodules:
  - config: Array backend (NumPy/CuPy) and logging configuration.
  - errors: Exception types.
  - estimator: ResidualEstimator and estimate_residual_heat.
  - fields: ConstantField / FunctionField coefficient data.
  - gradient: P1 gradient reconstruction.
  - marking: Bulk and maximum marking strategies.
  - mesh: TriMesh with geometry helpers and meshio I/O.
  - pde: HeatData bundle.
  - quadrature: Quadrature rules on the reference triangle.
  - topology: Edge-based neighbor topology.
"""

from .config import (
    config,
    configure,
    use,
    is_gpu,
    backend_name,
    xp,
    to_cpu,
    to_device,
    norm,
    set_log_level,
)

from heat_aposteriori.errors import DimensionMismatch, EstimatorError, InvalidDegree
from heat_aposteriori.estimator import (
    EstimatorTerms,
    ResidualEstimator,
    estimate_residual_heat,
)
from heat_aposteriori.fields import ConstantField, FunctionField, as_field
from heat_aposteriori.gradient import GradientField, P1Gradient, gradbasis
from heat_aposteriori.marking import mark
from heat_aposteriori.mesh import TriMesh
from heat_aposteriori.pde import HeatData
from heat_aposteriori.quadrature import quadpts
from heat_aposteriori.topology import EdgeNeighborTopology, MeshTopology

__all__ = [
    # Estimator
    "EstimatorTerms",
    "ResidualEstimator",
    "estimate_residual_heat",
    "mark",
    # Primitives
    "ConstantField",
    "EdgeNeighborTopology",
    "FunctionField",
    "GradientField",
    "HeatData",
    "MeshTopology",
    "P1Gradient",
    "TriMesh",
    "as_field",
    "gradbasis",
    "quadpts",
    # Errors
    "DimensionMismatch",
    "EstimatorError",
    "InvalidDegree",
    # Configuration and backend
    "config",
    "configure",
    "use",
    "is_gpu",
    "backend_name",
    "xp",
    "to_cpu",
    "to_device",
    "norm",
    "set_log_level",
]
