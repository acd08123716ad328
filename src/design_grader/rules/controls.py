"""Control surface and geometry attachment check.

Validates that the pitch control surface (PCS), vertical tail (VT), strake
and engines are physically attached to and contained by the fuselage.
Each sub-check is independent: missing geometry fails only the sub-check
that needs it.
"""

import math

from ..cells import get_number, get_number_by_index, is_finite
from ..schema import CheckOutcome, Workbook
from .base import RuleList

VALUE_TOL = 1e-3
AR_TOL = 0.1
ROOT_CHORD_OVERLAP = 0.25
VT_WING_FRACTION = 0.8
STRAKE_GAP_FT = 0.5
ENGINE_CLEARANCE_FT = 0.5
FUSELAGE_STATION_ROWS = range(34, 54)


def _all_finite(*values: float) -> bool:
    return all(is_finite(v) for v in values)


def _max_of(*values: float) -> float:
    """Max that propagates a missing operand as NaN."""
    if not _all_finite(*values):
        return math.nan
    return max(values)


def wing_leading_edge_x(span_station: float, sweep_deg: float, apex_x: float) -> float:
    """Wing leading-edge x at a span station for a given leading-edge sweep."""
    return span_station / math.tan((90 - sweep_deg) * math.pi / 180) + apex_x


def check_control_attachment(workbook: Workbook) -> CheckOutcome:
    acc = RuleList("controls")
    main = workbook.sheet("main")
    geom = workbook.sheet("geom")

    fuselage_end = get_number(main, "B32")

    # (a) longitudinal overlap with the fuselage end
    pcs_x = get_number(main, "C23")
    pcs_root = get_number(geom, "C8")
    if not _all_finite(fuselage_end, pcs_x, pcs_root):
        acc.fail("Unable to verify PCS placement due to missing geometry data")
    elif pcs_x > fuselage_end - ROOT_CHORD_OVERLAP * pcs_root:
        acc.fail("PCS X-location too far aft. Must overlap at least 25% of root chord.")

    vt_x = get_number(main, "H23")
    vt_root = get_number(geom, "C10")
    if not _all_finite(fuselage_end, vt_x, vt_root):
        acc.fail("Unable to verify vertical tail placement due to missing geometry data")
    elif vt_x > fuselage_end - ROOT_CHORD_OVERLAP * vt_root:
        acc.fail("VT X-location too far aft. Must overlap at least 25% of root chord.")

    # (b) PCS within the fuselage vertical bounds
    pcs_z = get_number(main, "C25")
    fuse_z_center = get_number(main, "D52")
    fuse_z_height = get_number(main, "F52")
    if not _all_finite(pcs_z, fuse_z_center, fuse_z_height):
        acc.fail("Unable to verify PCS vertical placement due to missing geometry data")
    elif not (fuse_z_center - fuse_z_height / 2 <= pcs_z <= fuse_z_center + fuse_z_height / 2):
        acc.fail("PCS Z-location outside fuselage vertical bounds.")

    # (c) VT lateral placement
    vt_y = get_number(main, "H24")
    fuse_width = get_number(main, "E52")
    vt_off_fuselage = False
    if not _all_finite(vt_y, fuse_width):
        acc.fail("Unable to verify vertical tail lateral placement due to missing geometry data")
    elif abs(vt_y) > fuse_width / 2 + VALUE_TOL:
        vt_off_fuselage = True
        acc.note("Vertical tail mounted off the fuselage; ensure structural support at the wing.")

    # (d) strake connection, only for designs with a strake
    strake_area = get_number(main, "D18")
    if is_finite(strake_area) and strake_area > 1:
        sweep = get_number(geom, "K15")
        span_station = get_number(geom, "M152")
        strake_x = get_number(geom, "L155")
        apex_x = get_number(geom, "L38")
        if not _all_finite(sweep, span_station, strake_x, apex_x):
            acc.fail("Unable to verify strake attachment due to missing geometry data")
        elif wing_leading_edge_x(span_station, sweep, apex_x) >= strake_x + STRAKE_GAP_FT:
            acc.fail("Strake disconnected.")

    # (e) no component beyond the fuselage end
    positions = [get_number_by_index(main, 23, col) for col in range(2, 9)]
    if not is_finite(fuselage_end):
        acc.fail("Unable to verify component X-locations: fuselage end (B32) missing")
    elif any(is_finite(x) and x >= fuselage_end for x in positions):
        acc.fail(
            "One or more components X-location extend beyond the fuselage end "
            f"(B32 = {fuselage_end:.1f})"
        )

    # (c, follow-up) VT mounted on the wing must overlap the trailing edge
    if vt_off_fuselage:
        vt_apex = (get_number(geom, "L163"), get_number(geom, "M163"))
        vt_root_te = (get_number(geom, "L166"), get_number(geom, "M166"))
        wing_te = (get_number(geom, "L41"), get_number(geom, "M41"))
        if not _all_finite(*vt_apex, *vt_root_te, *wing_te):
            acc.fail("Unable to verify vertical tail overlap with wing due to missing geometry data")
        else:
            chord = vt_root_te[0] - vt_apex[0]
            overlap = max(0.0, min(wing_te[0], vt_root_te[0]) - vt_apex[0])
            if not chord > 0 or overlap + VALUE_TOL < VT_WING_FRACTION * chord:
                acc.fail(
                    "Vertical tail mounted on the wing must overlap at least 80% of its root chord "
                    "with the wing trailing edge."
                )

    # (f) aspect ratio ordering
    wing_ar = get_number(main, "B19")
    pcs_ar = get_number(main, "C19")
    vt_ar = get_number(main, "H19")
    if not _all_finite(wing_ar, pcs_ar, vt_ar):
        acc.fail("Unable to verify aspect ratios due to missing geometry data (B19, C19, H19)")
    else:
        if pcs_ar > wing_ar + AR_TOL:
            acc.fail(
                f"Pitch control surface aspect ratio ({pcs_ar:.2f}) must be lower than "
                f"wing aspect ratio ({wing_ar:.2f})."
            )
        if vt_ar >= wing_ar - AR_TOL:
            acc.fail(
                f"Vertical tail aspect ratio ({vt_ar:.2f}) must be lower than "
                f"wing aspect ratio ({wing_ar:.2f})."
            )

    # (g, h) fuselage width around the engines and tail overhang
    engine_diameter = get_number(main, "H29")
    inlet_x = get_number(main, "F31")
    compressor_x = get_number(main, "F32")
    engine_start = inlet_x + compressor_x
    widths = []
    for row in FUSELAGE_STATION_ROWS:
        station_x = get_number_by_index(main, row, 2)
        width = get_number_by_index(main, row, 5)
        if _all_finite(station_x, width, engine_start) and station_x >= engine_start:
            widths.append(width)

    if not widths or not is_finite(engine_diameter):
        acc.fail("Unable to verify fuselage width clearance for engines")
    else:
        min_width = min(widths)
        max_width = max(widths)
        required_width = engine_diameter + ENGINE_CLEARANCE_FT
        if min_width + VALUE_TOL <= required_width:
            acc.fail(
                f"Fuselage minimum width ({min_width:.2f} ft) must exceed engine diameter + 0.5 ft "
                f"({required_width:.2f} ft)."
            )
        allowed_overhang = 2 * max_width
        if is_finite(fuselage_end):
            tips = (
                ("Pitch control surface", _max_of(get_number(geom, "L117"), get_number(geom, "L118"))),
                ("Vertical tail", _max_of(get_number(geom, "L165"), get_number(geom, "L166"))),
            )
            for label, tip_x in tips:
                if not is_finite(tip_x):
                    acc.fail(f"Unable to verify {label.lower()} tip overhang due to missing geometry data")
                    continue
                overhang = tip_x - fuselage_end
                if overhang > allowed_overhang + VALUE_TOL:
                    acc.fail(
                        f"{label} extends {overhang:.2f} ft beyond the fuselage end "
                        f"(limit {allowed_overhang:.2f} ft)."
                    )

    # (i) engine nacelle protrusion
    engine_length = get_number(main, "I29")
    if not _all_finite(engine_diameter, fuselage_end, inlet_x, compressor_x, engine_length):
        acc.fail("Unable to verify engine protrusion due to missing geometry data")
    else:
        protrusion = inlet_x + compressor_x + engine_length - fuselage_end
        if protrusion > engine_diameter + VALUE_TOL:
            acc.fail(
                f"Engine nacelles protrude {protrusion:.2f} ft past the fuselage end "
                f"(limit {engine_diameter:.2f} ft)."
            )

    return acc.outcome(vt_off_fuselage=vt_off_fuselage)
