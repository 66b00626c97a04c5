"""Basic-block CFG over emitted VM code.

Splits a VM listing into basic blocks and connects them with control-flow
edges. The representation is plain dicts so it can be printed, visualized
and inspected in tests without extra classes.

A basic block is a dict with:
  'label': str            (unique block name)
  'statements': List[str] (VM commands, in order)
  'out_edges': List[str]  (labels of successor blocks)
  'function': str         (enclosing VM function, or None before any)

The CFG is a dict with:
  'blocks': List[block]
  'entry': str (label of the first block)
  'exit': None

Block boundaries:
- `function F n` starts a block named `F`.
- `label L` starts a block named `F$L`.
- `goto`, `if-goto` and `return` end the current block.

Edges: `goto L` goes to `F$L`; `if-goto L` goes to `F$L` and falls through;
`return` has no successor; any other last command falls through to the next
block of the same function.

Example usage:
    cfg = build_vm_cfg(vm_lines)
    for block in cfg['blocks']:
        print(block['label'], block['statements'], '->', block['out_edges'])
"""

from typing import Any, Dict, List, Optional

JUMPS = ("goto", "if-goto", "return")


def _clean(lines: List[str]) -> List[str]:
    result = []
    for line in lines:
        line = line.split("//", 1)[0].strip()
        if line:
            result.append(line)
    return result


def build_vm_cfg(vm_lines: List[str]) -> Dict[str, Any]:
    blocks: List[Dict[str, Any]] = []
    function: Optional[str] = None
    current: Optional[Dict[str, Any]] = None
    counter = [0]

    def new_block(label: Optional[str] = None) -> Dict[str, Any]:
        if label is None:
            counter[0] += 1
            label = f"{function or 'global'}#{counter[0]}"
        b = {"label": label, "statements": [], "out_edges": [], "function": function}
        blocks.append(b)
        return b

    for line in _clean(vm_lines):
        parts = line.split()
        op = parts[0]

        if op == "function" and len(parts) > 1:
            function = parts[1]
            current = new_block(function)
        elif op == "label" and len(parts) > 1:
            current = new_block(f"{function}${parts[1]}" if function else parts[1])
        elif current is None:
            current = new_block()

        current["statements"].append(line)
        if op in JUMPS:
            current = None

    labels = {b["label"] for b in blocks}
    for i, b in enumerate(blocks):
        nxt = blocks[i + 1] if i + 1 < len(blocks) else None
        falls_to = nxt["label"] if nxt and nxt["function"] == b["function"] else None

        parts = b["statements"][-1].split() if b["statements"] else [""]
        op = parts[0]
        if op in ("goto", "if-goto") and len(parts) > 1:
            target = f"{b['function']}${parts[1]}" if b["function"] else parts[1]
            if target in labels:
                b["out_edges"].append(target)
            if op == "if-goto" and falls_to and falls_to not in b["out_edges"]:
                b["out_edges"].append(falls_to)
        elif op != "return" and falls_to:
            b["out_edges"].append(falls_to)

    return {
        "blocks": blocks,
        "entry": blocks[0]["label"] if blocks else None,
        "exit": None,
    }
