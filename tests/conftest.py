"""
Test fixtures shared across all WidgetLens tests.
"""

import pytest


@pytest.fixture
def counter_source():
    """Minimal stateful counter: one update call, no lifecycle hooks."""
    return """
class Counter extends StatefulWidget {}

class _CounterState extends State<Counter> {
  count = 0;

  increment() {
    this.setState(() => {
      this.count++;
    });
  }
}
"""


@pytest.fixture
def lifecycle_source():
    """State class whose dispose() forgets super.dispose()."""
    return """
import { StatefulWidget, State, Text } from '@flutterjs/material';

class Ticker extends StatefulWidget {
  createState() {
    return new _TickerState();
  }
}

class _TickerState extends State<Ticker> {
  ticks = 0;

  initState() {
    super.initState();
    this.ticks = 0;
  }

  dispose() {
    this.ticks = 0;
  }

  tick() {
    this.setState(() => {
      this.ticks = this.ticks + 1;
    });
  }

  build(context) {
    return new Text(this.ticks, { onTap: () => this.tick() });
  }
}

function main() {
  runApp(new Ticker());
}
"""


@pytest.fixture
def provider_source():
    """Change notifier and inherited widget consumed below their providers."""
    return """
import { StatelessWidget, Text } from '@flutterjs/material';
import { ChangeNotifier, ChangeNotifierProvider } from 'provider';

class CartModel extends ChangeNotifier {
  items = [];

  add(item) {
    this.items.push(item);
    this.notifyListeners();
  }
}

class ThemeScope extends InheritedWidget {
  constructor({ color, child }) {
    super({ child });
    this.color = color;
  }

  updateShouldNotify(old) {
    return old.color !== this.color;
  }

  static of(context) {
    return context.dependOnInheritedWidgetOfExactType<ThemeScope>();
  }
}

class CartBadge extends StatelessWidget {
  build(context) {
    const cart = context.watch<CartModel>();
    const scope = ThemeScope.of(context);
    return new Text(cart.items.length);
  }
}

class App extends StatelessWidget {
  build(context) {
    return new ChangeNotifierProvider<CartModel>({
      create: (ctx) => new CartModel(),
      child: new ThemeScope({ color: 'red', child: new CartBadge() }),
    });
  }
}

function main() {
  runApp(new App());
}
"""


@pytest.fixture
def malformed_source():
    """Broken members between valid declarations."""
    return """
class Broken extends StatelessWidget {
  build(context) {
    return new Text(;
  }
  @@@ ;
}

class Fine extends StatelessWidget {
  build(context) {
    return new Text('ok');
  }
}
"""
