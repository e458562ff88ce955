"""
src/resampling — Bootstrap and jackknife resampling.

Module layout
-------------
config.py        — Defaults re-exported from config/stat_params.py,
                   BasicStatistics dimension names
streams.py       — RNStream (numpy PCG64 with substreams), RNStreamProvider,
                   RandomStream contract, StreamControls pass-through
population.py    — DPopulation: uniform sampling with replacement
estimators.py    — Univariate estimator functions, MultivariateEstimator
                   contract, BasicStatistics, FunctionsEstimator
jackknife.py     — JackknifeEstimator (leave-one-out replicates)
bootstrap.py     — ResamplingEngine, BootstrapEstimate, BCa helpers
multivariate.py  — MultivariateResamplingEngine
multi.py         — MultiBootstrap: one engine per named sample
cases.py         — CaseBootstrap: row resampling of a matrix

Public interface
----------------
Bootstrap a statistic:
    engine = ResamplingEngine(data, estimator=average, stream=RNStream(seed))
    engine.generate_samples(1000)
    engine.percentile_bootstrap_ci(0.95)

Several statistics at once:
    mv = MultivariateResamplingEngine(data, BasicStatistics())
    for est in mv.generate_samples(1000):
        print(est.name, est.basic_bootstrap_ci())

Several named samples:
    mb = MultiBootstrap({"a": a_data, "b": b_data})
    mb.generate_samples({"a": 500, "b": 1000})
    mb.bootstrap("a").bca_bootstrap_ci()

Whole rows of a matrix:
    cb = CaseBootstrap(matrix, lambda m: m.mean(axis=0), names=["x", "y"])
    for est in cb.generate_samples(1000):
        print(est.name, est.percentile_bootstrap_ci())

Streams are never global: pass one explicitly, or draw numbered streams from
an RNStreamProvider, to share or reproduce random numbers across engines.
"""

from .bootstrap import (
    BootstrapEstimate,
    BootstrapEstimateBase,
    ResamplingEngine,
    acceleration_factor,
    bias_correction_factor,
)
from .cases import CaseBootstrap, MatrixEstimator
from .estimators import (
    BasicStatistics,
    Estimator,
    FunctionsEstimator,
    MultivariateEstimator,
    average,
    maximum,
    median,
    minimum,
    quantile_estimator,
    standard_deviation,
    variance,
)
from .jackknife import JackknifeEstimator
from .multi import MultiBootstrap
from .multivariate import MultivariateResamplingEngine
from .population import DPopulation
from .streams import RandomStream, RNStream, RNStreamProvider, StreamControls

__all__ = [
    # Streams
    "RandomStream",
    "RNStream",
    "RNStreamProvider",
    "StreamControls",
    "DPopulation",
    # Estimators
    "Estimator",
    "MultivariateEstimator",
    "average",
    "variance",
    "standard_deviation",
    "minimum",
    "maximum",
    "median",
    "quantile_estimator",
    "BasicStatistics",
    "FunctionsEstimator",
    # Engines
    "BootstrapEstimateBase",
    "BootstrapEstimate",
    "ResamplingEngine",
    "MultivariateResamplingEngine",
    "MultiBootstrap",
    "CaseBootstrap",
    "MatrixEstimator",
    "JackknifeEstimator",
    "bias_correction_factor",
    "acceleration_factor",
]
