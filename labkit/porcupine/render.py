"""Render the visualisation of a linearizability check as an HTML page.

The page is self-contained: the data produced by
:func:`labkit.porcupine.visualization.visualization_json` is embedded in a
JSON script block and drawn as SVG by a small script. Every operation is a
box on its client's row, laid out left to right in time order. The longest
partial linearization of each partition is drawn as a chain of points.
Possible but illegal next steps are drawn in red. Hovering over an operation
shows the longest linearization that contains it, and the model state
after that operation.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TextIO, Union

from labkit.porcupine.checker import LinearizationInfo
from labkit.porcupine.model import Model
from labkit.porcupine.visualization import visualization_json

__all__ = ["render_html", "visualize", "visualize_path"]

_PLACEHOLDER = "__HISTORY_DATA__"

_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>Linearizability history</title>
<style>
body { font-family: Helvetica, Arial, sans-serif; font-size: 15px; margin: 10px; }
text { dominant-baseline: middle; }
#key { margin-bottom: 12px; }
#key span { display: inline-block; margin-right: 18px; }
.swatch { display: inline-block; width: 10px; height: 10px; margin-right: 4px; }
.op-box { fill: #7fc8e8; stroke: #777; stroke-width: 1; }
.op-box.active { stroke-width: 4; }
.op-text { font-family: Menlo, Consolas, monospace; font-size: 13px; text-anchor: middle; pointer-events: none; }
.row-label { text-anchor: middle; }
.lp { stroke: rgba(0, 0, 0, 0.55); }
.lp-bad { stroke: rgba(220, 0, 0, 0.55); }
.lp-point { stroke-width: 5; }
.lp-line { stroke-width: 2; }
.faded { opacity: 0.2; }
.gone { display: none; }
#tip { position: absolute; display: none; background: #fff; border: 1px solid #bbb;
       border-radius: 4px; padding: 6px; font-size: 13px; white-space: pre-line; }
</style>
</head>
<body>
<div id="key">
<span>Rows: clients</span><span>Left to right: time</span>
<span><i class="swatch" style="background: rgba(0,0,0,0.55)"></i>linearization point</span>
<span><i class="swatch" style="background: rgba(220,0,0,0.55)"></i>illegal next step</span>
</div>
<div id="canvas"></div>
<div id="tip"></div>
<script id="history-data" type="application/json">__HISTORY_DATA__</script>
<script>
'use strict'
const SVG_NS = 'http://www.w3.org/2000/svg'
const PAD = 10, BOX_H = 30, ROW_GAP = 15, XOFF = 20, GAP = 20, EPS = 20
const CHAR_W = 8, TEXT_PAD = 10, BLEED = 5

function node(tag, attrs, parent) {
  const e = document.createElementNS(SVG_NS, tag)
  for (const k of Object.keys(attrs || {})) e.setAttribute(k, attrs[k])
  if (parent) parent.appendChild(e)
  return e
}

function rowY(client) { return PAD + client * (BOX_H + ROW_GAP) }

function layout(items) {
  const stamps = [...new Set(items.flatMap(it => [it.h.Start, it.h.End]))].sort((a, b) => a - b)
  const byEnd = items.slice().sort((a, b) => a.h.End - b.h.End)
  const xs = new Map()
  let k = 0
  stamps.forEach((ts, n) => {
    let pos = n === 0 ? 0 : xs.get(stamps[n - 1]) + GAP
    while (k < byEnd.length && byEnd[k].h.End <= ts) {
      const h = byEnd[k].h
      const start = xs.has(h.Start) ? xs.get(h.Start) : pos
      pos = Math.max(pos, start + h.Description.length * CHAR_W + 2 * TEXT_PAD)
      k++
    }
    xs.set(ts, pos)
  })
  return { xs, last: stamps.length ? xs.get(stamps[stamps.length - 1]) : 0 }
}

function drawPoint(g, x, client, cls) {
  const y = rowY(client) - BLEED
  node('line', { x1: x, x2: x, y1: y, y2: y + BOX_H + 2 * BLEED, 'class': cls + ' lp-point' }, g)
}

function drawLink(g, x1, c1, x2, c2, cls) {
  const y1 = rowY(c1) - BLEED + (c1 >= c2 ? 0 : BOX_H + 2 * BLEED)
  const y2 = rowY(c2) - BLEED + (c1 <= c2 ? 0 : BOX_H + 2 * BLEED)
  node('line', { x1: x1, x2: x2, y1: y1, y2: y2, 'class': cls + ' lp-line' }, g)
}

function render(data) {
  const items = []
  data.forEach((part, p) => part.History.forEach((h, i) => items.push({ p, i, h })))
  let clients = 0
  items.forEach(it => { clients = Math.max(clients, it.h.ClientId + 1) })
  const { xs, last } = layout(items)
  const left = PAD + XOFF
  const height = 2 * PAD + clients * BOX_H + Math.max(0, clients - 1) * ROW_GAP
  const svg = node('svg', { width: 2 * PAD + XOFF + last + 200, height: height },
                   document.getElementById('canvas'))
  for (let c = 0; c < clients; c++) {
    node('text', { x: XOFF / 2, y: rowY(c) + BOX_H / 2, 'class': 'row-label' }, svg).textContent = c
  }

  const boxes = data.map(() => [])
  const layers = data.map(() => node('g', {}, svg))
  items.forEach(it => {
    const x = left + xs.get(it.h.Start)
    const w = xs.get(it.h.End) - xs.get(it.h.Start)
    const y = rowY(it.h.ClientId)
    const box = node('rect', { x: x, y: y, width: w, height: BOX_H, rx: 4, ry: 4, 'class': 'op-box' },
                     layers[it.p])
    node('text', { x: x + w / 2, y: y + BOX_H / 2, 'class': 'op-text' }, layers[it.p]).textContent =
      it.h.Description
    boxes[it.p][it.i] = box
    box.addEventListener('mouseover', ev => focus(it.p, it.i, ev))
    box.addEventListener('mousemove', ev => moveTip(ev))
    box.addEventListener('mouseout', () => unfocus(it.p, it.i))
  })

  const linLayers = data.map((part, p) => part.PartialLinearizations.map((lin, n) => {
    const g = node('g', { 'class': n === 0 ? '' : 'gone' }, svg)
    const history = part.History
    let prevX = null, prevClient = null
    const included = new Set()
    lin.forEach(step => {
      const h = history[step.Index]
      const here = left + xs.get(h.Start)
      const x = prevX === null ? here : Math.max(here, prevX + EPS)
      if (prevX !== null) drawLink(g, prevX, prevClient, x, h.ClientId, 'lp')
      drawPoint(g, x, h.ClientId, 'lp')
      prevX = x
      prevClient = h.ClientId
      included.add(step.Index)
    })
    let minEnd = Infinity
    history.forEach((h, i) => { if (!included.has(i)) minEnd = Math.min(minEnd, h.End) })
    history.forEach((h, i) => {
      if (included.has(i) || h.Start >= minEnd || prevX === null) return
      const x = Math.max(left + xs.get(h.Start), prevX + EPS)
      drawLink(g, prevX, prevClient, x, h.ClientId, 'lp-bad')
      drawPoint(g, x, h.ClientId, 'lp-bad')
    })
    return g
  }))

  const tip = document.getElementById('tip')

  function showOnly(p, n) {
    linLayers.forEach((gs, q) => gs.forEach((g, m) => {
      g.classList.toggle('gone', !(q === p && m === n))
    }))
  }

  function focus(p, i, ev) {
    layers.forEach((l, q) => l.classList.toggle('faded', q !== p))
    boxes[p][i].classList.add('active')
    const part = data[p]
    const h = part.History[i]
    const n = Object.prototype.hasOwnProperty.call(part.Largest, i) ? part.Largest[i] : null
    let msg
    if (n === null) {
      showOnly(-1, -1)
      msg = 'Not part of any partial linearization.'
    } else {
      showOnly(p, n)
      const lin = part.PartialLinearizations[n]
      const at = lin.findIndex(step => step.Index === i)
      msg = ''
      if (at > 0) msg += 'Previous state:\\n' + lin[at - 1].StateDescription + '\\n\\n'
      msg += 'New state:\\n' + lin[at].StateDescription
    }
    tip.textContent = msg + '\\n\\nCall: ' + h.Start + '\\nReturn: ' + h.End
    tip.style.display = 'block'
    moveTip(ev)
  }

  function moveTip(ev) {
    tip.style.left = (ev.pageX + 20) + 'px'
    tip.style.top = (ev.pageY + 20) + 'px'
  }

  function unfocus(p, i) {
    boxes[p][i].classList.remove('active')
    layers.forEach(l => l.classList.remove('faded'))
    linLayers.forEach(gs => gs.forEach((g, m) => g.classList.toggle('gone', m !== 0)))
    tip.style.display = 'none'
  }
}

render(JSON.parse(document.getElementById('history-data').textContent))
</script>
</body>
</html>
"""


def render_html(data_json: str) -> str:
    """Return the page that draws the given visualisation JSON.

    Raises ValueError if ``data_json`` is not valid JSON.
    """
    try:
        json.loads(data_json)
    except ValueError as exc:
        raise ValueError(f"visualisation data is not valid JSON: {exc}") from exc
    # "</" cannot occur outside a JSON string, and "\\/" is a valid escape inside one
    safe = data_json.replace("</", "<\\/")
    return _TEMPLATE.replace(_PLACEHOLDER, safe)


def visualize(model: Model, info: LinearizationInfo, output: TextIO) -> None:
    """Write the visualisation page for a checked history to a text stream."""
    output.write(render_html(visualization_json(model, info)))


def visualize_path(
    model: Model, info: LinearizationInfo, path: Union[str, Path]
) -> None:
    """Write the visualisation page for a checked history to a file."""
    page = render_html(visualization_json(model, info))
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(page)