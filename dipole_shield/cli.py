# dipole_shield/cli.py
from dipole_shield.config import settings
from dipole_shield.config.settings import ENERGIES_KEV, PROTECTED_SIZE, reference_energy_kev


def get_float(prompt, default=None, min_val=None):
    """
    Safe float input with optional default. Non-interactive (EOF) returns default.
    """
    while True:
        try:
            user = input(prompt)
        except EOFError:
            return float(default) if default is not None else None
        if user.strip() == "" and default is not None:
            return float(default)
        try:
            val = float(user)
            if min_val is not None and val <= min_val:
                raise ValueError
            return val
        except (ValueError, TypeError):
            print("❌ Please enter a valid number.")


def parse_energies(text):
    """
    Parse "1, 10, 50" or "1 10 50" into a sorted list of positive floats.
    """
    parts = text.replace(",", " ").split()
    if not parts:
        raise ValueError("no energies given")
    energies = [float(p) for p in parts]
    if any(e <= 0 for e in energies):
        raise ValueError("energies must be > 0")
    return sorted(energies)


def get_energies(prompt, default):
    while True:
        try:
            user = input(prompt)
        except EOFError:
            return list(default)
        if user.strip() == "":
            return list(default)
        try:
            return parse_energies(user)
        except ValueError:
            print("❌ Enter positive energies in keV separated by spaces or commas.")


def run_cli():
    print("======================================")
    print("  DIPOLE SHIELD ELECTRON SCAN (CLI)   ")
    print("======================================")

    default_L = getattr(settings, "PROTECTED_SIZE", PROTECTED_SIZE)
    protected_size = get_float(
        f"\nProtected region size L (m) [default {default_L}]: ",
        default=default_L,
        min_val=0.0,
    )

    default_energies = getattr(settings, "ENERGIES_KEV", ENERGIES_KEV)
    default_text = ", ".join(f"{e:g}" for e in default_energies)
    energies = get_energies(f"Energies in keV [default {default_text}]: ", default_energies)

    e_ref_default = reference_energy_kev(energies)
    e_ref = get_float(
        f"Shielding reference energy (keV) [default {e_ref_default:g}]: ",
        default=e_ref_default,
        min_val=0.0,
    )

    print("\n✅ CLI input complete.")
    print(f"→ L = {protected_size:g} m")
    print(f"→ Energies: {', '.join(f'{e:g}' for e in energies)} keV")
    print(f"→ Dipole sized to shield {e_ref:g} keV")

    return float(protected_size), energies, float(e_ref)
