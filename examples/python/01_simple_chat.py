"""Simple chat - load a model and talk to it in a loop.

This example shows:
- Loading a model with `litert_lm.Engine(...)`
- One session carrying a whole conversation
- Handling generation errors without leaving the loop

Usage:
    python examples/python/01_simple_chat.py model.litertlm

Type 'quit' or 'exit' to stop.
"""

import sys

import litert_lm

if len(sys.argv) < 2:
    print(f"Usage: {sys.argv[0]} <model_path>", file=sys.stderr)
    print(f"Example: {sys.argv[0]} gemma3-1b-it.litertlm", file=sys.stderr)
    sys.exit(1)

model_path = sys.argv[1]
print(f"Loading model from: {model_path}")

with litert_lm.Engine(model_path, litert_lm.Backend.CPU) as engine:
    print("Engine created successfully!")

    with engine.create_session() as session:
        print("Session created successfully!")
        print()
        print("You can now chat with the model. Type 'quit' or 'exit' to stop.")
        print("=" * 40)
        print()

        while True:
            try:
                prompt = input("You: ").strip()
            except EOFError:
                print()
                break

            if not prompt:
                continue
            if prompt.lower() in ("quit", "exit"):
                print("Goodbye!")
                break

            # A failed turn is reported and the session stays usable
            try:
                print(f"Assistant: {session.generate(prompt)}")
            except litert_lm.LiteRtLmError as e:
                print(f"Error generating response: {e}", file=sys.stderr)
            print()
