'''
Single-security valuation entrypoint.

This module provides the main entry point for running a valuation. It:
1. Derives starting parameters from a StockSnapshot via scenario policies
2. Runs the forward DCF engine
3. Inverts the model for the growth rate implied by the current price
4. Returns a ValuationSummary

Usage:
  from reverse_dcf.run import run_valuation
  from reverse_dcf.domain.types import StockSnapshot

  snapshot = StockSnapshot(ticker='MSFT', price=100.0, eps=5.0, fcf=4.0)
  summary = run_valuation(snapshot)
  print(f"IV: ${summary.intrinsic_value:.2f}")
'''

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from reverse_dcf.analysis.sensitivity import SensitivityGridBuilder
from reverse_dcf.domain.types import (
    ModelParameters,
    PolicyOutput,
    StockSnapshot,
    ValuationSummary,
)
from reverse_dcf.engine.dcf import compute_intrinsic_value, compute_upside
from reverse_dcf.engine.implied_growth import solve_implied_growth_detailed
from reverse_dcf.scenarios.cases import default_cases, evaluate_cases
from reverse_dcf.scenarios.config import ScenarioConfig
from reverse_dcf.scenarios.registry import create_policies

logger = logging.getLogger(__name__)


def prepare_parameters(
    snapshot: StockSnapshot,
    config: Optional[ScenarioConfig] = None,
) -> PolicyOutput[ModelParameters]:
  '''
  Suggest starting model parameters for a snapshot.

  Args:
    snapshot: Base inputs from the data-retrieval layer
    config: ScenarioConfig (default: ScenarioConfig.default())

  Returns:
    PolicyOutput with ModelParameters and the merged policy diagnostics
  '''
  if config is None:
    config = ScenarioConfig.default()

  policies = create_policies(config)
  all_diag: Dict[str, Any] = {
      'scenario': config.name,
      'ticker': snapshot.ticker,
  }

  growth_result = policies['growth'].compute(snapshot)
  all_diag.update({f'growth_{k}': v for k, v in growth_result.diag.items()})

  multiple_result = policies['multiple'].compute(snapshot)
  all_diag.update(
      {f'multiple_{k}': v for k, v in multiple_result.diag.items()})

  params = config.to_params(growth_rate=growth_result.value,
                            terminal_multiple=multiple_result.value)
  return PolicyOutput(value=params, diag=all_diag)


def run_valuation(
    snapshot: StockSnapshot,
    config: Optional[ScenarioConfig] = None,
    params: Optional[ModelParameters] = None,
) -> ValuationSummary:
  '''
  Run forward and reverse DCF for one snapshot.

  Args:
    snapshot: Base inputs from the data-retrieval layer
    config: ScenarioConfig (default: ScenarioConfig.default())
    params: Explicit parameters; derived from config policies if omitted

  Returns:
    ValuationSummary with intrinsic value, implied growth and upside

  Raises:
    DomainError: If the snapshot's price or base metric is unusable
  '''
  if config is None:
    config = ScenarioConfig.default()
  if params is None:
    params = prepare_parameters(snapshot, config).value

  metric = config.metric_type
  base_value = snapshot.base_value(metric)

  result = compute_intrinsic_value(base_value, params)
  implied = solve_implied_growth_detailed(snapshot.price, base_value, params,
                                          config.search_bounds())
  if not implied.converged:
    logger.debug('%s: implied growth %s after %d iterations', snapshot.ticker,
                 implied.status.value, implied.iterations)

  return ValuationSummary(
      intrinsic_value=result.value,
      implied_growth=implied,
      upside=compute_upside(result.value, snapshot.price),
      current_price=snapshot.price,
      params=params,
      metric=metric,
      result=result,
  )


def _load_snapshot(args: argparse.Namespace,
                   parser: argparse.ArgumentParser) -> StockSnapshot:
  '''Build the snapshot from a JSON file or from command-line values.'''
  if args.snapshot:
    try:
      with open(args.snapshot, encoding='utf-8') as f:
        data = json.load(f)
    except OSError as e:
      parser.error(f'Cannot read snapshot {args.snapshot}: {e}')
    except json.JSONDecodeError as e:
      parser.error(f'Snapshot {args.snapshot} is not valid JSON: {e}')

    if not isinstance(data, dict):
      parser.error(f'Snapshot {args.snapshot} must hold a JSON object')
    try:
      return StockSnapshot.from_dict(data)
    except KeyError as e:
      parser.error(f'Snapshot {args.snapshot} is missing field {e}')
    except (TypeError, ValueError) as e:
      parser.error(f'Snapshot {args.snapshot} has an invalid value: {e}')

  if args.price is None or args.eps is None:
    parser.error('--price and --eps are required without --snapshot')

  return StockSnapshot(
      ticker=args.ticker,
      price=args.price,
      eps=args.eps,
      fcf=args.fcf if args.fcf is not None else args.eps,
      growth_rate=args.growth_rate,
  )


def _load_config(args: argparse.Namespace,
                 parser: argparse.ArgumentParser) -> ScenarioConfig:
  '''Scenario from a JSON file, or the named preset.'''
  scenario_map = {
      'default': ScenarioConfig.default,
      'perpetuity': ScenarioConfig.perpetuity,
      'manual': ScenarioConfig.manual,
  }
  if not args.config:
    return scenario_map[args.scenario]()

  try:
    return ScenarioConfig.from_json(args.config.read_text(encoding='utf-8'))
  except OSError as e:
    parser.error(f'Cannot read config {args.config}: {e}')
  except (TypeError, ValueError) as e:
    parser.error(f'Invalid config {args.config}: {e}')


def main() -> None:
  '''CLI entrypoint.'''
  parser = argparse.ArgumentParser(
      description='Reverse DCF valuation',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog='''
Examples:
  # Manual inputs
  python -m reverse_dcf.run --price 100 --eps 5 --growth-rate 10

  # Snapshot from the data-retrieval layer, FCF-based, perpetuity growth
  python -m reverse_dcf.run --snapshot msft.json --metric FCF \\
      --scenario perpetuity --output msft_grid.csv
      ''')

  parser.add_argument('--snapshot',
                      type=Path,
                      help='Snapshot JSON file (camelCase fields)')
  parser.add_argument('--ticker', type=str, default='CUSTOM', help='Ticker')
  parser.add_argument('--price', type=float, help='Current price per share')
  parser.add_argument('--eps', type=float, help='Trailing EPS')
  parser.add_argument('--fcf',
                      type=float,
                      help='Trailing FCF per share (default: EPS)')
  parser.add_argument('--metric',
                      type=str,
                      choices=['EPS', 'FCF'],
                      help='Per-share metric to project')
  parser.add_argument(
      '--scenario',
      type=str,
      default='default',
      choices=['default', 'perpetuity', 'manual'],
      help='Scenario preset',
  )
  parser.add_argument('--config',
                      type=Path,
                      help='ScenarioConfig JSON file (overrides --scenario)')

  parser.add_argument('--discount-rate', type=float, help='Percent')
  parser.add_argument('--growth-rate', type=float, help='Percent')
  parser.add_argument('--years', type=int, help='Explicit forecast years')
  parser.add_argument('--terminal-method',
                      type=str,
                      choices=['multiple', 'growth'])
  parser.add_argument('--terminal-multiple', type=float)
  parser.add_argument('--terminal-growth', type=float, help='Percent')

  parser.add_argument('--workers',
                      type=int,
                      default=None,
                      help='Thread pool size for grid cells')
  parser.add_argument('--output',
                      type=Path,
                      help='Write the value grid to this CSV path')
  parser.add_argument('--verbose',
                      '-v',
                      action='store_true',
                      help='Verbose output')

  args = parser.parse_args()

  logging.basicConfig(
      level=logging.DEBUG if args.verbose else logging.INFO,
      format='%(message)s',
  )

  config = _load_config(args, parser)
  if args.metric:
    config.metric = args.metric

  snapshot = _load_snapshot(args, parser)
  logger.info('Using scenario: %s', config.name)

  overrides = {
      'discount_rate': args.discount_rate,
      'growth_rate': args.growth_rate,
      'years': args.years,
      'terminal_method': args.terminal_method,
      'terminal_multiple': args.terminal_multiple,
      'terminal_growth_rate': args.terminal_growth,
  }
  try:
    params = prepare_parameters(snapshot, config).value.replace(
        **{k: v for k, v in overrides.items() if v is not None})
    summary = run_valuation(snapshot, config, params)
    base_value = snapshot.base_value(config.metric_type)
    builder = SensitivityGridBuilder(base_value,
                                     snapshot.price,
                                     params,
                                     bounds=config.search_bounds(),
                                     max_workers=args.workers)
    value_grid = builder.build_value_grid()
    implied_grid = builder.build_implied_growth_grid()
    cases = evaluate_cases(
        base_value, snapshot.price, params,
        default_cases(params.growth_rate, params.terminal_multiple,
                      params.terminal_method))
  except (KeyError, ValueError) as e:
    parser.error(str(e))

  separator = '=' * 80
  logger.info('\n%s', separator)
  logger.info('Reverse DCF: %s (%s %.2f, price $%.2f)', snapshot.ticker,
              summary.metric.value, base_value, snapshot.price)
  logger.info(separator)
  logger.info('  Discount Rate: %.1f%%', params.discount_rate)
  logger.info('  Growth Rate: %.1f%% for %d years', params.growth_rate,
              params.years)
  logger.info('  Terminal: %s (%g)', params.terminal_method.value,
              params.terminal_input)

  logger.info('\nValuation Result:')
  logger.info('  Intrinsic Value: $%.2f', summary.intrinsic_value)
  logger.info('  Upside: %+.1f%%', summary.upside)
  logger.info('  Implied Growth: %.2f%% (%s)',
              summary.implied_growth.growth_rate,
              summary.implied_growth.status.value)

  logger.info('\n%s', separator)
  logger.info('Intrinsic Value per Share ($)')
  logger.info(separator)
  logger.info('\n%s', value_grid.to_frame().to_string(
      float_format=lambda x: f'${x:.2f}'))

  logger.info('\n%s', separator)
  logger.info('Implied Growth (%)')
  logger.info(separator)
  logger.info('\n%s', implied_grid.to_frame().to_string(
      float_format=lambda x: f'{x:.1f}%'))

  logger.info('\n%s', separator)
  logger.info('Scenarios')
  logger.info(separator)
  logger.info('\n%s', cases.to_string(float_format=lambda x: f'{x:.2f}'))
  logger.info('%s\n', separator)

  if args.output:
    value_grid.to_frame().to_csv(args.output)
    logger.info('Saved to: %s', args.output)


if __name__ == '__main__':
  main()
