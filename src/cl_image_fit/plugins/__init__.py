"""Converter plugins exposed through the cl_image_fit.routes entry point group."""
