from __future__ import annotations

import logging
from dataclasses import asdict

from flask import Flask, request, render_template_string, url_for, session, jsonify

from millcalc.data import default_catalog
from millcalc.deflection import (
    DeflectionOptimizationConfig,
    optimize_tool_configuration,
    suggest_tools_for_target_deflection,
)
from millcalc.errors import CalculationError, InvalidParameterError, ValidationFailed, ValidationIssue
from millcalc.geometry import effective_flutes
from millcalc.models import CutType, Inputs, PrecisionLevel
from millcalc.output import apply_output_rounding
from millcalc.pipeline import CalculationOptions, apply_scaling, compute, compute_with_tool_config
from millcalc.rigidity import FrameType, MotionType, RigidityInputs, SpindleMountType, estimate_machine_rigidity
from millcalc.tool_config import ToolConfiguration

DEFAULT_CONFIG = {
    "SECRET_KEY": "change-me-to-any-random-string",
    "HOLDER_COMPLIANCE_MM_PER_N": 0.002,
    "HOBBY_MODE": False,
    "PRECISION_LEVEL": "general",
    "OPTIMIZER_WORKERS": 1,
    "LOG_LEVEL": "INFO",
}

app = Flask(__name__)
app.config.from_mapping(DEFAULT_CONFIG)
# MILLCALC_HOBBY_MODE=true, MILLCALC_OPTIMIZER_WORKERS=4, ...
app.config.from_prefixed_env("MILLCALC")
app.logger.setLevel(app.config["LOG_LEVEL"])
logging.getLogger("millcalc").setLevel(app.config["LOG_LEVEL"])


# ----------------------------
# Helpers
# ----------------------------
def to_float(s: str):
    s = (s or "").strip()
    if s == "":
        return None
    return float(s)

def to_int(s: str):
    s = (s or "").strip()
    if s == "":
        return None
    return int(s)

def calc_options(hobby_mode=None, precision_level=None) -> CalculationOptions:
    return CalculationOptions(
        holder_compliance_mm_per_n=float(app.config["HOLDER_COMPLIANCE_MM_PER_N"]),
        hobby_mode=bool(app.config["HOBBY_MODE"] if hobby_mode is None else hobby_mode),
        precision_level=precision_level or app.config["PRECISION_LEVEL"],
    )

def optimizer_workers() -> int:
    return max(int(app.config["OPTIMIZER_WORKERS"]), 1)

def finalize(output):
    # power-limited feed/MRR first, then display rounding
    return apply_output_rounding(apply_scaling(output))

def parse_inputs(data) -> Inputs:
    try:
        return Inputs.from_dict(data)
    except (TypeError, ValueError) as e:
        raise InvalidParameterError(f"Malformed inputs: {e}") from e

def parse_tool_config(data) -> ToolConfiguration:
    try:
        return ToolConfiguration.from_dict(data)
    except (AttributeError, TypeError, ValueError) as e:
        raise InvalidParameterError(f"Malformed tool_config: {e}") from e

def parse_range(data, key: str, default: tuple[float, float]) -> tuple[float, float]:
    raw = data.get(key) or default
    try:
        lo, hi = (float(v) for v in raw)
    except (TypeError, ValueError) as e:
        raise InvalidParameterError(f"{key} must be a pair of numbers") from e
    return lo, hi

def opt_number(data, key: str, cast=float):
    val = data.get(key)
    return None if val in (None, "") else cast(val)

def choices(records: dict) -> list[tuple[str, str]]:
    return sorted(((k, getattr(v, "name", "") or k) for k, v in records.items()), key=lambda kv: kv[1])


# ----------------------------
# Templates
# ----------------------------
HOME_TEMPLATE = """
<!doctype html>
<html>
<head>
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Mill Feeds & Speeds</title>
<style>
  body { font-family: Arial, sans-serif; margin:18px; }
  .card { max-width:720px; margin:0 auto; padding:18px; border:1px solid #ddd; border-radius:14px; }
  h1 { font-size:24px; margin:0 0 14px; }
  a.button {
    display:block;
    padding:18px;
    font-size:20px;
    margin-top:10px;
    border-radius:12px;
    border:1px solid #ccc;
    background:#f6f6f6;
    color:#111;
    text-decoration:none;
    text-align:center;
  }
  .small { font-size:13px; color:#444; margin-top:10px; }
</style>
</head>

<body>
<div class="card">
  <h1>Mill Feeds & Speeds</h1>

  <a class="button" href="{{ url_for('mill') }}">Milling Calculator</a>
  <a class="button" href="{{ url_for('rigidity') }}">Machine Rigidity Estimator</a>

  <div class="small">
    {{ counts.machines }} machines, {{ counts.spindles }} spindles, {{ counts.tools }} tools,
    {{ counts.materials }} materials loaded. JSON API under /api.
  </div>
</div>
</body>
</html>
"""

MILL_TEMPLATE = """
<!doctype html>
<html>
<head>
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Milling - Mill Feeds & Speeds</title>
<style>
  body { font-family: Arial, sans-serif; margin: 18px; }
  .topbar { max-width: 820px; margin: 0 auto 10px; display:flex; justify-content:space-between; align-items:center; }
  .topbar a { text-decoration:none; font-size: 14px; }
  .card { max-width: 820px; margin: 0 auto; padding: 18px; border: 1px solid #ddd; border-radius: 14px; }
  h1 { font-size: 22px; margin: 0 0 10px; }
  label { display:block; margin-top: 12px; font-size: 14px; }
  input, select { width: 100%; padding: 14px; font-size: 18px; margin-top: 6px; border-radius: 10px; border: 1px solid #ccc; }
  input[type=checkbox] { width:auto; }
  button { width: 100%; padding: 16px; font-size: 18px; margin-top: 14px; border-radius: 12px; border: none; cursor: pointer; background:#f6f6f6; }
  .row { display:flex; gap: 12px; }
  .row > div { flex:1; }
  .out { margin-top: 14px; padding: 12px; border-radius: 12px; background:#f6f6f6; font-size: 18px; }
  .warn { margin-top: 10px; padding: 10px; border-radius: 12px; background:#fff6d6; border:1px solid #ffe08a; }
  .small { font-size: 13px; color:#444; margin-top: 8px; }
  .danger { background:#ffecec; border:1px solid #ffb3b3; }
  li.danger { background:none; border:none; color:#b00000; }
</style>
</head>
<body>

<div class="topbar">
  <a href="{{ url_for('home') }}">← Home</a>
  <a href="{{ url_for('rigidity') }}">Rigidity Estimator →</a>
</div>

<div class="card">
  <h1>Milling Calculator</h1>

  <form method="post">
    <div class="row">
      <div>
        <label>Machine</label>
        <select name="machine_id">
          {% for k, name in machines %}
            <option value="{{k}}" {% if k==form.machine_id %}selected{% endif %}>{{name}}</option>
          {% endfor %}
        </select>
      </div>
      <div>
        <label>Spindle</label>
        <select name="spindle_id">
          {% for k, name in spindles %}
            <option value="{{k}}" {% if k==form.spindle_id %}selected{% endif %}>{{name}}</option>
          {% endfor %}
        </select>
      </div>
    </div>

    <div class="row">
      <div>
        <label>Tool</label>
        <select name="tool_id">
          {% for k, name in tools %}
            <option value="{{k}}" {% if k==form.tool_id %}selected{% endif %}>{{name}}</option>
          {% endfor %}
        </select>
      </div>
      <div>
        <label>Material</label>
        <select name="material_id">
          {% for k, name in materials %}
            <option value="{{k}}" {% if k==form.material_id %}selected{% endif %}>{{name}}</option>
          {% endfor %}
        </select>
      </div>
    </div>

    <div class="row">
      <div>
        <label>Operation</label>
        <select name="cut_type">
          {% for c in cut_types %}
            <option value="{{c}}" {% if c==form.cut_type %}selected{% endif %}>{{c|capitalize}}</option>
          {% endfor %}
        </select>
      </div>
      <div>
        <label>Aggressiveness (0.1-3.0)</label>
        <input name="aggressiveness" inputmode="decimal" value="{{form.aggressiveness}}">
      </div>
    </div>

    <div class="row">
      <div>
        <label>DOC mm (optional)</label>
        <input name="user_doc_mm" inputmode="decimal" value="{{form.user_doc_mm}}">
      </div>
      <div>
        <label>WOC mm (optional)</label>
        <input name="user_woc_mm" inputmode="decimal" value="{{form.user_woc_mm}}">
      </div>
    </div>

    <div class="row">
      <div>
        <label>Flutes override (optional)</label>
        <input name="override_flutes" inputmode="numeric" value="{{form.override_flutes}}">
      </div>
      <div>
        <label>Stickout mm override (optional)</label>
        <input name="override_stickout_mm" inputmode="decimal" value="{{form.override_stickout_mm}}">
      </div>
    </div>

    <div class="row">
      <div>
        <label><input type="checkbox" name="hobby_mode" value="1" {% if form.hobby_mode %}checked{% endif %}>
          Hobby machine limits</label>
      </div>
      <div>
        <label>Precision</label>
        <select name="precision_level">
          {% for p in precision_levels %}
            <option value="{{p}}" {% if p==form.precision_level %}selected{% endif %}>{{p|capitalize}}</option>
          {% endfor %}
        </select>
      </div>
    </div>

    <button type="submit">Calculate</button>
  </form>

  {% if results %}
    <div class="out">
      <div><b>{{results.title}}</b></div>
      {% for k,v in results.items() %}
        {% if k!='title' %}
          <div><b>{{k}}:</b> {{v}}</div>
        {% endif %}
      {% endfor %}
    </div>
  {% endif %}

  {% if warnings %}
    <div class="warn">
      <b>Notes / Warnings:</b>
      <ul>
        {% for w in warnings %}
          <li class="{{w.severity}}">{{w.message}}</li>
        {% endfor %}
      </ul>
    </div>
  {% endif %}

  {% if error %}
    <div class="out danger">
      <b>Error:</b> {{error}}
    </div>
  {% endif %}

</div>
</body>
</html>
"""

RIGIDITY_TEMPLATE = """
<!doctype html>
<html>
<head>
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>Rigidity - Mill Feeds & Speeds</title>
<style>
  body { font-family: Arial, sans-serif; margin: 18px; }
  .topbar { max-width: 820px; margin: 0 auto 10px; }
  .topbar a { text-decoration:none; font-size: 14px; }
  .card { max-width: 820px; margin: 0 auto; padding: 18px; border: 1px solid #ddd; border-radius: 14px; }
  h1 { font-size: 22px; margin: 0 0 10px; }
  label { display:block; margin-top: 12px; font-size: 14px; }
  input, select { width: 100%; padding: 14px; font-size: 18px; margin-top: 6px; border-radius: 10px; border: 1px solid #ccc; }
  button { width: 100%; padding: 16px; font-size: 18px; margin-top: 14px; border-radius: 12px; border: none; cursor: pointer; background:#f6f6f6; }
  .row { display:flex; gap: 12px; }
  .row > div { flex:1; }
  .out { margin-top: 14px; padding: 12px; border-radius: 12px; background:#f6f6f6; font-size: 18px; }
  .warn { margin-top: 10px; padding: 10px; border-radius: 12px; background:#fff6d6; border:1px solid #ffe08a; }
  .danger { background:#ffecec; border:1px solid #ffb3b3; }
</style>
</head>
<body>

<div class="topbar"><a href="{{ url_for('home') }}">← Home</a></div>

<div class="card">
  <h1>Machine Rigidity Estimator</h1>

  <form method="post">
    <div class="row">
      <div>
        <label>Frame</label>
        <select name="frame">
          {% for v in frames %}<option value="{{v}}" {% if v==form.frame %}selected{% endif %}>{{v}}</option>{% endfor %}
        </select>
      </div>
      <div>
        <label>Motion system</label>
        <select name="motion">
          {% for v in motions %}<option value="{{v}}" {% if v==form.motion %}selected{% endif %}>{{v}}</option>{% endfor %}
        </select>
      </div>
      <div>
        <label>Spindle mount</label>
        <select name="mount">
          {% for v in mounts %}<option value="{{v}}" {% if v==form.mount %}selected{% endif %}>{{v}}</option>{% endfor %}
        </select>
      </div>
    </div>

    <div class="row">
      <div><label>Weight kg</label><input name="weight_kg" inputmode="decimal" value="{{form.weight_kg}}"></div>
      <div><label>X mm</label><input name="x_mm" inputmode="decimal" value="{{form.x_mm}}"></div>
      <div><label>Y mm</label><input name="y_mm" inputmode="decimal" value="{{form.y_mm}}"></div>
      <div><label>Z mm</label><input name="z_mm" inputmode="decimal" value="{{form.z_mm}}"></div>
    </div>

    <div class="row">
      <div><label>Max unsupported span mm (optional)</label><input name="max_span_mm" inputmode="decimal" value="{{form.max_span_mm}}"></div>
      <div><label>Height / width (optional)</label><input name="height_to_width_ratio" inputmode="decimal" value="{{form.height_to_width_ratio}}"></div>
    </div>

    <button type="submit">Estimate</button>
  </form>

  {% if estimate %}
    <div class="out">
      <div><b>Rigidity factor:</b> {{ "%.2f"|format(estimate.rigidity_factor) }}
        (confidence {{ "%.0f"|format(estimate.confidence * 100) }}%)</div>
      {% for k, v in estimate.breakdown.items() %}<div>{{v}}</div>{% endfor %}
      {% if estimate.nearest_known_machines %}
        <div><b>Similar machines:</b></div>
        <ul>
          {% for m in estimate.nearest_known_machines %}
            <li>{{m.machine_id}} ({{ "%.2f"|format(m.rigidity_factor) }}): {{m.reason}}</li>
          {% endfor %}
        </ul>
      {% endif %}
    </div>
    {% if estimate.warnings %}
      <div class="warn"><ul>{% for w in estimate.warnings %}<li>{{w}}</li>{% endfor %}</ul></div>
    {% endif %}
  {% endif %}

  {% if error %}
    <div class="out danger"><b>Error:</b> {{error}}</div>
  {% endif %}
</div>
</body>
</html>
"""


# ----------------------------
# Routes
# ----------------------------
@app.route("/")
def home():
    catalog = default_catalog()
    counts = {k: len(v) for k, v in catalog.summary().items()}
    return render_template_string(HOME_TEMPLATE, counts=counts)


MILL_FIELDS = (
    "machine_id", "spindle_id", "tool_id", "material_id", "cut_type", "aggressiveness",
    "user_doc_mm", "user_woc_mm", "override_flutes", "override_stickout_mm", "precision_level",
)

@app.route("/mill", methods=["GET", "POST"])
def mill():
    catalog = default_catalog()
    error = None
    results = None
    warnings: list[dict] = []

    if request.method == "POST":
        form = {k: request.form.get(k, "") for k in MILL_FIELDS}
        form["hobby_mode"] = bool(request.form.get("hobby_mode"))
    else:
        form = {k: "" for k in MILL_FIELDS}
        form.update(cut_type="profile", aggressiveness="1.0", hobby_mode=bool(app.config["HOBBY_MODE"]),
                    precision_level=app.config["PRECISION_LEVEL"])
        form.update(session.get("mill_last", {}))

    if request.method == "POST":
        try:
            inputs = Inputs(
                machine_id=form["machine_id"],
                spindle_id=form["spindle_id"],
                tool_id=form["tool_id"],
                material_id=form["material_id"],
                cut_type=form["cut_type"],
                aggressiveness=1.0 if to_float(form["aggressiveness"]) is None else to_float(form["aggressiveness"]),
                user_doc_mm=to_float(form["user_doc_mm"]),
                user_woc_mm=to_float(form["user_woc_mm"]),
                override_flutes=to_int(form["override_flutes"]),
                override_stickout_mm=to_float(form["override_stickout_mm"]),
            )
            options = calc_options(form["hobby_mode"], form["precision_level"] or None)
            raw = compute(inputs, catalog, options)
            out = finalize(raw)

            results = {
                "title": "Milling Results",
                "RPM": f"{out.rpm}",
                "Feed (mm/min)": f"{out.feed_mm_min}",
                "Surface speed": f"{out.vc_m_min} m/min ({out.sfm} SFM)",
                "Chipload (mm/tooth)": f"{out.fz_mm:.4f}",
                "WOC x DOC (mm)": f"{out.ae_mm:.2f} x {out.ap_mm:.2f}",
                "MRR (mm³/min)": f"{out.mrr_mm3_min:.1f}",
                "Power (W)": f"{out.power_w:.1f} of {out.power_available_w:.1f}",
                "Cutting force (N)": f"{out.force_n:.1f}",
                "Deflection (mm)": f"{out.deflection_mm:.4f}",
                "Effective diameter (mm)": f"{out.effective_diameter:.2f}",
            }
            if out.scaling_applied:
                results["Feed before power limit (mm/min)"] = f"{raw.feed_mm_min}"
            warnings = [w.to_dict() for w in out.warnings]

            session["mill_last"] = form

        except ValueError as e:
            error = str(e)

    return render_template_string(
        MILL_TEMPLATE,
        form=form,
        machines=choices(catalog.machines),
        spindles=choices(catalog.spindles),
        tools=choices(catalog.tools),
        materials=choices(catalog.materials),
        cut_types=[c.value for c in CutType],
        precision_levels=[p.value for p in PrecisionLevel],
        results=results,
        warnings=warnings,
        error=error,
    )


RIGIDITY_FIELDS = ("frame", "motion", "mount", "weight_kg", "x_mm", "y_mm", "z_mm", "max_span_mm", "height_to_width_ratio")

@app.route("/rigidity", methods=["GET", "POST"])
def rigidity():
    error = None
    estimate = None

    if request.method == "POST":
        form = {k: request.form.get(k, "") for k in RIGIDITY_FIELDS}
        try:
            x, y, z = (to_float(form[k]) for k in ("x_mm", "y_mm", "z_mm"))
            if not (x and y and z):
                raise ValueError("Working volume X, Y and Z are required.")
            estimate = estimate_machine_rigidity(RigidityInputs(
                weight_kg=to_float(form["weight_kg"]) or 0.0,
                working_volume_mm3=x * y * z,
                frame=form["frame"],
                motion=form["motion"],
                mount=form["mount"],
                max_span_mm=to_float(form["max_span_mm"]),
                height_to_width_ratio=to_float(form["height_to_width_ratio"]),
            ))
            session["rigidity_last"] = form
        except ValueError as e:
            error = str(e)
    else:
        form = {k: "" for k in RIGIDITY_FIELDS}
        form.update(session.get("rigidity_last", {}))

    return render_template_string(
        RIGIDITY_TEMPLATE,
        form=form,
        frames=[f.value for f in FrameType],
        motions=[m.value for m in MotionType],
        mounts=[m.value for m in SpindleMountType],
        estimate=estimate,
        error=error,
    )


# ----------------------------
# JSON API
# ----------------------------
@app.errorhandler(ValidationFailed)
def validation_failed(e: ValidationFailed):
    return jsonify(error=str(e), errors=[asdict(issue) for issue in e.errors]), 400

@app.errorhandler(CalculationError)
def calculation_error(e: CalculationError):
    return jsonify(error=str(e)), 422


@app.get("/api/catalog")
def api_catalog():
    summary = default_catalog().summary()
    summary["cut_types"] = [c.value for c in CutType]
    summary["precision_levels"] = [p.value for p in PrecisionLevel]
    return jsonify(summary)


@app.post("/api/calculate")
def api_calculate():
    data = request.get_json(silent=True) or {}
    inputs = parse_inputs(data)
    raw_opts = data.get("options") or {}
    options = calc_options(raw_opts.get("hobby_mode"), raw_opts.get("precision_level"))

    if data.get("tool_config"):
        output = compute_with_tool_config(inputs, default_catalog(), parse_tool_config(data["tool_config"]), options)
    else:
        output = compute(inputs, default_catalog(), options)

    app.logger.debug("calculate %s -> rpm=%s feed=%s", inputs, output.rpm, output.feed_mm_min)
    return jsonify(finalize(output).to_dict())


@app.post("/api/optimize")
def api_optimize():
    """Target-deflection search.

    With ``tool_id`` the search is centred on that catalog tool; otherwise
    explicit ``diameter_range_mm``/``stickout_range_mm`` (or the defaults) are used.
    """
    data = request.get_json(silent=True) or {}
    try:
        target = float(data["target_deflection_mm"])
        force = float(data["force_n"])
        rpm = float(data["rpm"])
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidParameterError("target_deflection_mm, force_n and rpm are required numbers") from e
    try:
        flutes = opt_number(data, "effective_flutes", int)
        max_suggestions = opt_number(data, "max_suggestions", int)
    except (TypeError, ValueError) as e:
        raise InvalidParameterError("effective_flutes and max_suggestions must be integers") from e

    tool_id = data.get("tool_id")
    if tool_id:
        tool = default_catalog().tool(tool_id)
        if tool is None:
            raise ValidationFailed([ValidationIssue("tool_id", f"Tool not found: {tool_id}")])
        result = optimize_tool_configuration(
            tool, target, force, rpm, flutes or effective_flutes(tool),
            float(app.config["HOLDER_COMPLIANCE_MM_PER_N"]), optimizer_workers(),
        )
    else:
        config = DeflectionOptimizationConfig(
            target_deflection_mm=target,
            force_n=force,
            rpm=rpm,
            effective_flutes=flutes or 2,
            tool_type=data.get("tool_type") or "endmill_flat",
            diameter_range_mm=parse_range(data, "diameter_range_mm", (3.0, 25.0)),
            stickout_range_mm=parse_range(data, "stickout_range_mm", (10.0, 100.0)),
            max_suggestions=max_suggestions or 5,
            holder_compliance_mm_per_n=float(app.config["HOLDER_COMPLIANCE_MM_PER_N"]),
            workers=optimizer_workers(),
        )
        result = suggest_tools_for_target_deflection(config)

    return jsonify(asdict(result))


@app.post("/api/rigidity")
def api_rigidity():
    data = request.get_json(silent=True) or {}
    try:
        weight = float(data["weight_kg"])
        volume = float(data["working_volume_mm3"])
        frame, motion, mount = data["frame"], data["motion"], data["mount"]
        max_span = opt_number(data, "max_span_mm")
        height_ratio = opt_number(data, "height_to_width_ratio")
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidParameterError(f"Missing or malformed rigidity input: {e}") from e

    inputs = RigidityInputs(
        weight_kg=weight,
        working_volume_mm3=volume,
        frame=frame,
        motion=motion,
        mount=mount,
        max_span_mm=max_span,
        height_to_width_ratio=height_ratio,
    )
    return jsonify(asdict(estimate_machine_rigidity(inputs)))


if __name__ == "__main__":
    app.run(debug=True)
