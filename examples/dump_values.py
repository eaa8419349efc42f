"""Print a few values with specimen's pretty printer.

Run with: python examples/dump_values.py
"""

from specimen import pretty_print


class Node:
    def __init__(self, label, parent=None):
        self.label = label
        self.parent = parent
        self.children = []
        if parent is not None:
            parent.children.append(self)


def main():
    root = Node("root")
    Node("left", root)
    Node("right", root)

    cycle = [1, 2]
    cycle.append(cycle)

    print(pretty_print({"tree": root, "cycle": cycle, "text": "line one\nline two"}))
    print(pretty_print(list(range(100)), max_array_entries=5))


if __name__ == "__main__":
    main()
