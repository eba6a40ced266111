# rule_trace.py

from typing import List, Dict, Any
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches


def trace_rule_block(rule_block, plot: bool = False) -> List[Dict[str, Any]]:
    """
    Collect the state each rule of a block was left in by the last cycle.

    Args:
        rule_block: The RuleBlock to inspect (after Engine.process()).
        plot: Show a bar chart of the activation degrees.

    Returns:
        A list of dictionaries, one per rule, in block order:
        rule_index, rule (text), loaded, degree, triggered.
    """
    traces = []
    for i, rule in enumerate(rule_block.rules):
        traces.append(
            {
                "rule_index": i,
                "rule": rule.text,
                "loaded": rule.is_loaded(),
                "degree": rule.activation_degree,
                "triggered": rule.is_triggered(),
            }
        )

    if plot:
        plot_rule_degrees(traces, rule_block.name)
    return traces


def plot_rule_degrees(trace_data, block_name=""):
    labels = [f"R{t['rule_index'] + 1}" for t in trace_data]
    ws = [t["degree"] for t in trace_data]
    colors = ["green" if t["triggered"] else "gray" for t in trace_data]

    fig, ax1 = plt.subplots(figsize=(12, 6))

    bars = ax1.bar(range(len(labels)), ws, color=colors, alpha=0.7)

    ax1.set_ylabel("Activation Degree")
    ax1.set_ylim(0.0, max([1.0] + ws) * 1.1)
    ax1.set_xticks(range(len(labels)))
    ax1.set_xticklabels(labels, rotation=45, ha="right")

    # Annotate W values on top of bars
    for bar in bars:
        height = bar.get_height()
        if height > 0:
            ax1.text(
                bar.get_x() + bar.get_width() / 2,
                height + 0.01,
                f"{height:.2f}",
                ha="center",
                va="bottom",
                fontsize=8,
                color="black",
            )

    # Legend
    fired_patch = mpatches.Patch(color="green", label="Triggered")
    idle_patch = mpatches.Patch(color="gray", label="Not triggered")
    ax1.legend(handles=[fired_patch, idle_patch], loc="upper left")

    plt.title(f"Rule Activation Degrees – {block_name}")
    plt.tight_layout()
    plt.show()
