"""macprov — provision a macOS workstation from a Brewfile and a few dotfiles."""

__version__ = "0.1.0"
