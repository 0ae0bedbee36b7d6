"""Batch inference - answer a list of prompts, one fresh session each.

This example shows:
- Reusing one loaded Engine for many prompts
- A new Session per prompt, so prompts do not share context
- Reading benchmark counters after each generation

Usage:
    python examples/python/02_batch_inference.py model.litertlm
"""

import sys

import litert_lm

if len(sys.argv) < 2:
    print(f"Usage: {sys.argv[0]} <model_path>", file=sys.stderr)
    print(f"Example: {sys.argv[0]} gemma3-1b-it.litertlm", file=sys.stderr)
    sys.exit(1)

model_path = sys.argv[1]
print(f"Loading model from: {model_path}")

PROMPTS = [
    "What is the capital of France?",
    "Explain quantum computing in simple terms.",
    "Write a haiku about programming.",
    "What is 2 + 2?",
]

with litert_lm.Engine(model_path, litert_lm.Backend.CPU) as engine:
    print("Engine created successfully!\n")
    print("Running batch inference...\n")
    print("=" * 40)

    for i, prompt in enumerate(PROMPTS, start=1):
        print(f"\n[{i}] Prompt: {prompt}")

        with engine.create_session() as session:
            try:
                print(f"Response: {session.generate(prompt)}")
            except litert_lm.GenerationError as e:
                print(f"Error: {e}", file=sys.stderr)
                continue

            # Benchmark data is only present when the engine was built with it
            try:
                info = session.get_benchmark_info()
                print(
                    f"Time to first token: {info.time_to_first_token:.3f}s, "
                    f"decode turns: {info.num_decode_turns}"
                )
            except litert_lm.MetricsUnavailableError:
                pass

        print("-" * 40)

print("\nBatch inference complete!")
