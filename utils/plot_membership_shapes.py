import matplotlib.pyplot as plt
import math
import numpy as np
import os

from fuzzyrules.config import load_engine


def sample_terms(variable, points=200):
    """
    Sample every term of a variable over its range.

    Infinite ranges fall back to [-1, 1].

    Returns:
        (x, {term name: membership array})
    """
    lo, hi = variable.minimum, variable.maximum
    if math.isinf(lo) or math.isinf(hi):
        lo, hi = -1.0, 1.0
    x = np.linspace(lo, hi, points)
    curves = {}
    for term in variable.terms:
        curves[term.name] = np.array([term.membership(float(v)) for v in x])
    return x, curves


def plot_membership_functions(variable, value=None, save=False, output_dir="plots"):
    """
    Plot the membership functions of a variable.
    Optionally mark the current crisp value with a vertical line.
    Args:
        variable: InputVariable or OutputVariable with shaped terms
        value (float): Crisp value to mark (optional)
        save (bool): Whether to save the plot as a PNG
        output_dir (str): Directory to save the plot
    """
    x, curves = sample_terms(variable)
    plt.figure(figsize=(8, 4))
    for label, y in curves.items():
        plt.plot(x, y, label=label)
        plt.fill_between(x, y, alpha=0.1)

    if value is not None and not math.isnan(value):
        plt.axvline(value, color="red", linestyle="--", label=f"{variable.name} = {value:.3f}")

    plt.title(f"Membership Functions – {variable.name}")
    plt.xlabel(variable.name)
    plt.ylabel("Membership Degree")
    plt.grid(True)
    plt.legend()
    plt.tight_layout()

    if save:
        os.makedirs(output_dir, exist_ok=True)
        filename = os.path.join(output_dir, f"{variable.name.lower()}_membership_functions.png")
        plt.savefig(filename)
        print(f"Saved plot to: {filename}")

    plt.show()


def main():
    import argparse

    parser = argparse.ArgumentParser(
        description="Plot fuzzy membership function shapes."
    )
    parser.add_argument(
        "--config",
        default=os.path.join("config", "engine_config.toml"),
        help="Engine configuration file.",
    )
    parser.add_argument(
        "--save",
        action="store_true",
        help="Save plots as PNG files in the 'plots/' directory.",
    )
    args = parser.parse_args()
    if not os.path.exists(args.config):
        print(f"Error: Config file not found at: {args.config}")
        return

    engine = load_engine(args.config)
    # Takagi-Sugeno outputs (Constant, Linear) have no shape to draw.
    for variable in engine.input_variables:
        plot_membership_functions(variable, save=args.save)


if __name__ == "__main__":
    main()
