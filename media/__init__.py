"""Media preparation: container parsing, duration resolution, audio engines and chunking."""
