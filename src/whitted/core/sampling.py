"""Deterministic per-pixel random numbers for jittered sampling.

Render kernels run pixels in parallel, so a single shared random engine would
make the jitter sequence depend on the thread schedule. Instead every sample
derives its own generator state from ``(seed, pixel_index, sample_index)``
with an integer hash, which keeps renders reproducible on every backend.

Example:
    >>> @ti.kernel
    ... def jitter(seed: ti.i32, pixel: ti.i32, sample: ti.i32) -> ti.f32:
    ...     state = sample_state(seed, pixel, sample)
    ...     u, state = next_float(state)
    ...     return u
"""

import taichi as ti


@ti.func
def wang_hash(value: ti.u32) -> ti.u32:
    """Scramble a 32-bit integer with Thomas Wang's hash."""
    x = (value ^ ti.cast(61, ti.u32)) ^ (value >> ti.cast(16, ti.u32))
    x = x * ti.cast(9, ti.u32)
    x = x ^ (x >> ti.cast(4, ti.u32))
    x = x * ti.cast(668265261, ti.u32)
    x = x ^ (x >> ti.cast(15, ti.u32))
    return x


@ti.func
def sample_state(seed: ti.i32, pixel_index: ti.i32, sample_index: ti.i32) -> ti.u32:
    """Derive the generator state for one sample of one pixel.

    Args:
        seed: The render seed.
        pixel_index: Row-major pixel index (row * width + column).
        sample_index: Index of the sample within the pixel.

    Returns:
        A non-zero 32-bit generator state.
    """
    state = wang_hash(ti.cast(seed, ti.u32))
    state = wang_hash(state ^ ti.cast(pixel_index, ti.u32))
    state = wang_hash(state ^ ti.cast(sample_index, ti.u32))
    if state == ti.cast(0, ti.u32):
        state = ti.cast(1, ti.u32)
    return state


@ti.func
def next_float(state: ti.u32):
    """Advance a xorshift32 generator and draw a float in [0, 1).

    Args:
        state: The current non-zero generator state.

    Returns:
        A tuple of (value, new_state).
    """
    x = state
    x = x ^ (x << ti.cast(13, ti.u32))
    x = x ^ (x >> ti.cast(17, ti.u32))
    x = x ^ (x << ti.cast(5, ti.u32))
    # 24 high bits map exactly onto the f32 mantissa
    value = ti.cast(x >> ti.cast(8, ti.u32), ti.f32) * (1.0 / 16777216.0)
    return value, x


@ti.func
def jitter_pair(seed: ti.i32, pixel_index: ti.i32, sample_index: ti.i32):
    """Draw the (u, v) sub-pixel offsets for one sample, each in [0, 1)."""
    state = sample_state(seed, pixel_index, sample_index)
    jitter_u, state = next_float(state)
    jitter_v, state = next_float(state)
    return jitter_u, jitter_v
