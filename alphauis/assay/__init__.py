"""Assay generation workflow: transition filtering and UIS selection.

Stages:
1. Transition filtering (reannotate, restrict, detecting)
2. In-silico ion maps for targets and decoys per swath window
3. Unique ion signature selection for targets and decoys
"""

from .swath import (
    NO_SWATH,
    get_swath,
    is_in_swath,
    validate_swathes,
)

from .filters import (
    reannotate_transitions,
    restrict_transitions,
    detecting_transitions,
    prepare_transitions,
)

from .ion_map import (
    InSilicoMaps,
    generate_target_in_silico_map,
    generate_decoy_in_silico_map,
)

from .builder import (
    AssayReport,
    build_ion_indices,
    generate_target_assays,
    generate_decoy_assays,
    uis_transitions,
)

__all__ = [
    # Swath windows
    'NO_SWATH',
    'get_swath',
    'is_in_swath',
    'validate_swathes',

    # Transition filtering
    'reannotate_transitions',
    'restrict_transitions',
    'detecting_transitions',
    'prepare_transitions',

    # In-silico maps
    'InSilicoMaps',
    'generate_target_in_silico_map',
    'generate_decoy_in_silico_map',

    # UIS assays
    'AssayReport',
    'build_ion_indices',
    'generate_target_assays',
    'generate_decoy_assays',
    'uis_transitions',
]
