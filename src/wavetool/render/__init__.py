"""Raster views of wavetable spectra."""

from wavetool.render.spectrogram import render_spectrogram, save_spectrogram_png

__all__ = ["render_spectrogram", "save_spectrogram_png"]
