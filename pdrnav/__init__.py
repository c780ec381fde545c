"""Particle-filter pedestrian dead reckoning for indoor positioning.

This package contains the PDR core driven by smartphone motion sensors:
- sensors: Sensor sample types, step detection, step length, heading
- estimators: Particle filter over planar position hypotheses
- session: Session state and the per-sample update cycle (PDRTracker)
- eval: Trajectory error metrics and plots
- sim: Synthetic corridor walks with smartphone sensor streams
- config: Immutable PDR configuration
"""

__version__ = "0.1.0"
