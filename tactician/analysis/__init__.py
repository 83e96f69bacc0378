"""
Board analysis shared by evaluators, adjustment passes and the interception
responder: unit impact, lane interception categories, threat checks, lane
favorability and target value.
"""

from .impact import impact_from_stats, unit_impact
from .lanes import (
    LaneAnalysis, SectionProjection, ThreatCheck, analyze_lane, count_degraded_sections,
    lane_score, project_section_damage, projected_lane_score, threats_kept_in_check,
    would_cross_threshold,
)
from .targeting import DESTROY_DAMAGE, is_lethal, target_value

__all__ = [
    'impact_from_stats',
    'unit_impact',
    'LaneAnalysis',
    'SectionProjection',
    'ThreatCheck',
    'analyze_lane',
    'count_degraded_sections',
    'lane_score',
    'project_section_damage',
    'projected_lane_score',
    'threats_kept_in_check',
    'would_cross_threshold',
    'DESTROY_DAMAGE',
    'is_lethal',
    'target_value',
]
