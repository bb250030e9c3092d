"""
localfit constants only.

=============================================================================
CONVENTION QUICK REFERENCE
=============================================================================

RELATIVE POSITIONS:
  Every weight is evaluated on q = neighbor.pos - eval_pos (neighbor minus query).
  Moments are accumulated in these local coordinates and mapped back to world
  coordinates only at finalize.

PLANES:
  Implicit form n.x + offset = 0 with ||n|| = 1.
  Normal sign is deterministic: the last non-negligible component is positive.

STATUS CODES (FitStatus values, also used as int codes in batched outputs):
  0 = UNDEFINED, 1 = STABLE, 2 = UNSTABLE, 3 = NEED_OTHER_PASS
=============================================================================
"""

# =============================================================================
# STATUS CODES
# =============================================================================

LF_STATUS_UNDEFINED = 0
LF_STATUS_STABLE = 1
LF_STATUS_UNSTABLE = 2
LF_STATUS_NEED_OTHER_PASS = 3

# =============================================================================
# NUMERIC STABILIZATION
# =============================================================================

# Plane fit is degenerate when lambda_1 <= LF_DEGENERACY_REL_EPS * lambda_max
# (neighbors collinear or coincident, normal not unique).
LF_DEGENERACY_REL_EPS = 1e-10

# Absolute floor on the largest covariance eigenvalue (all neighbors coincident).
LF_EIG_ABS_EPS = 1e-30

# Eigenvalues below LF_NEAR_NULL_FACTOR * eig_max are counted as near-null in certs.
LF_NEAR_NULL_FACTOR = 1e-8

# Components with |n_k| below this are skipped when fixing the normal sign.
LF_SIGN_EPS = 1e-12

# =============================================================================
# DEFAULTS
# =============================================================================

LF_DEFAULT_SCALE = 1.0
LF_DEFAULT_KERNEL = "smooth"
LF_DEFAULT_DTYPE = "float64"

# Upper bound on traversals the fit driver performs for one query.
# Every shipped extension needs at most two.
LF_MAX_PASSES = 4
