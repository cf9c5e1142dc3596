# poloniusfacts

A library for borrow-checker fact relations: the input relations a compiler
emits (`loan_issued_at`, `cfg_edge`, `subset_base`, …), interned to small
typed atoms. Facts can be loaded from tab-delimited files or generated from a
small program language. Analysis results can be written out as aligned text
rows or rendered as GraphViz graphs.

## Modules

- `poloniusfacts.facts`: the atom types `Origin`, `Loan`, `Point`, `Variable`
  and `Path`, and `AllFacts`, a dataclass with one list per input relation.
  `AllFacts.relation_names()` lists the relations in loading order.
  `AllFacts.atom_types(name)` gives a relation's column types and raises
  `ValueError` for an unknown name.
- `poloniusfacts.intern`: `Interner` maps strings of one kind to atoms and back
  (`intern`, `untern`, `untern_all`). `InternerTables` holds one interner per
  atom type, as `origins`, `loans`, `points`, `variables` and `paths`. It also
  provides `table_for`, `intern_row` and an `untern` that accepts an atom of
  any kind.
- `poloniusfacts.tab_delim`: `load_tab_delimited_facts(tables, facts_dir)`
  reads `<facts_dir>/<relation>.facts` for every relation, one tab-separated
  row per line. `load_tab_delimited_file(tables, path, atom_types)` reads a
  single file. Rows of single-column relations are bare atoms; wider rows are
  tuples. A missing file, too few columns or extra columns raise
  `FactsLoadError`, which carries the `path` and, where it applies, the `line`.
- `poloniusfacts.ir` and `poloniusfacts.parser`: `parse_input(text)` parses the
  program language into an `Input` tree of `Block`s, `Statement`s and effect
  dataclasses. Malformed text raises `ParseError`, a `ValueError` that carries
  `line` and `column`.
- `poloniusfacts.program`: `parse_from_program(program, tables)` turns a
  program into `AllFacts`. Each statement gets a `"Start(B[i])"` point and a
  `"Mid(B[i])"` point. Edges join Start to Mid, the previous Mid to the next
  Start, and a block's last Mid to the first Start of each `goto` target. The
  relations come out deduplicated and sorted.
- `poloniusfacts.dump`: `Output` is a dataclass that holds analysis results
  (`errors`, `subset_errors`, `move_errors`, liveness relations, …) keyed by
  atoms.
  - `flatten_rows(value, tables)` flattens nested mappings, sets, lists and
    tuples of atoms into rows of strings.
  - `dump_rows(name, stream, tables, value)` writes those rows aligned.
  - `dump_output(output, output_dir, tables)` writes `errors`, `move_errors`
    and `subset_errors`. When `output.dump_enabled` is set, it also writes the
    intermediate relations. Each relation goes to `<output_dir>/<name>.facts`,
    or to standard output when `output_dir` is `None`.
- `poloniusfacts.graphviz`:
  - `graphviz(output, all_facts, output_file, tables)` writes the control-flow
    graph, with each point's input and output facts in a record node.
  - `liveness_graph(output, all_facts, output_file, tables)` writes the graph
    with live variables on its edges. It merges chains of points across which
    liveness does not change.
  - `escape_for_graphviz(text)` escapes a label.

## Example

```python
from poloniusfacts.intern import InternerTables
from poloniusfacts.program import parse_from_program

program = """
    placeholders { 'a, 'b }
    known_subsets { 'b: 'a }

    block B0 {
        loan_issued_at('x, L0), outlives('b: 'x), outlives('x: 'a);
        goto B1;
    }

    block B1 {
        var_used_at(V1);
    }
"""

tables = InternerTables()
facts = parse_from_program(program, tables)

for source, target in facts.cfg_edge:
    print(tables.untern(source), "->", tables.untern(target))
```

Loading a directory of `.facts` files:

```python
from poloniusfacts.intern import InternerTables
from poloniusfacts.tab_delim import load_tab_delimited_facts

tables = InternerTables()
facts = load_tab_delimited_facts(tables, "nll-facts/main")
print(len(facts.loan_issued_at))
```

## The program language

```
placeholders { 'a, 'b, 'c }
known_subsets { 'a: 'b }
use_of_var_derefs_origin { (V1, 'a) }
drop_of_var_derefs_origin { (V1, 'b) }

block B0 {
    // effects at the Mid point of statement 0
    loan_invalidated_at(L0);
    // Start-point effects go before the '/', Mid-point effects after it
    loan_invalidated_at(L1) / use('a, 'b);
    goto B1, B2;
}
```

- `placeholders` is required. The other three sections are optional and must
  appear in the order shown.
- Each placeholder origin also gets a placeholder loan of the same name.
- Without a `/`, `origin_live_on_entry` effects are also copied to the
  statement's Start point.
- A `goto` ends the block's statements.
- `//` starts a comment that runs to the end of the line.

The effects are `use`, `outlives`, `loan_issued_at`, `loan_invalidated_at`,
`loan_killed_at`, `origin_live_on_entry`, `var_defined_at` and `var_used_at`.
`parse_from_program` turns them into facts as follows:

| Effect | Fact |
| --- | --- |
| `loan_issued_at` | `loan_issued_at` |
| `outlives` | `subset_base` |
| `loan_killed_at` | `loan_killed_at` |
| `loan_invalidated_at` | `loan_invalidated_at` |
| `var_defined_at` | `var_defined_at` |
| `var_used_at` | `var_used_at` |

`use` and `origin_live_on_entry` are parsed but produce no facts.

## What it does not do

The package does not run a borrow check itself. `Output` only holds results
that were computed elsewhere, so that they can be dumped or rendered. There is
no command-line tool; everything is used as a library.

## Running the tests

```
pip install -e ".[test]"
pytest
```